# routers/subjects.py
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from sqlalchemy import func

from db import get_session
import models
import crud
from schemas import SubjectIn, SubjectUpdate, ChildSubjectIn
from serializers import subject_out, exam_structure_out, question_out
from utils import normalize_question_type, slugify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subjects", tags=["subjects"])

# Blueprint returned for subjects that have no exam structure yet
DEFAULT_SECTIONS = [
    {"code": "q1", "name_en": "Q1 - Fill in Blanks", "question_type": "fill_blank", "question_count": 5, "marks_per_question": 1},
    {"code": "q2", "name_en": "Q2 - True/False", "question_type": "true_false", "question_count": 5, "marks_per_question": 1},
    {"code": "q3", "name_en": "Q3 - MCQ (1 Mark)", "question_type": "mcq_single", "question_count": 5, "marks_per_question": 1},
    {"code": "q4", "name_en": "Q4 - MCQ (2 Marks)", "question_type": "mcq_two", "question_count": 5, "marks_per_question": 2},
    {"code": "q5", "name_en": "Q5 - MCQ (3 Marks)", "question_type": "mcq_three", "question_count": 5, "marks_per_question": 3},
    {"code": "q6", "name_en": "Q6 - Match Columns", "question_type": "match", "question_count": 5, "marks_per_question": 2},
    {"code": "q7", "name_en": "Q7 - Short Answer", "question_type": "short_answer", "question_count": 4, "marks_per_question": 4},
    {"code": "q8", "name_en": "Q8 - Programming", "question_type": "programming", "question_count": 3, "marks_per_question": 8},
]


def _default_blueprint(subject_id: str) -> dict:
    sections = []
    for i, s in enumerate(DEFAULT_SECTIONS, start=1):
        sections.append({
            **s,
            "id": s["code"],
            "name_mr": s["name_en"],
            "total_marks": s["question_count"] * s["marks_per_question"],
            "order_index": i,
        })
    return {
        "id": None,
        "subject_id": subject_id,
        "sections": sections,
        "duration_minutes": 150,
        "total_questions": sum(s["question_count"] for s in sections),
        "total_marks": sum(s["total_marks"] for s in sections),
        "passing_percentage": 35,
    }


def _slug_taken(db, slug: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(models.Subject).filter(models.Subject.slug == slug)
    if exclude_id:
        query = query.filter(models.Subject.id != exclude_id)
    return db.query(query.exists()).scalar()


# -----------------------------------------------------------------------------
# Listing & stats
# -----------------------------------------------------------------------------
@router.get("")
def list_subjects(parent_id: Optional[str] = None, class_level_id: Optional[str] = None,
                  root_only: bool = False):
    with get_session() as db:
        query = db.query(models.Subject).filter(models.Subject.is_active.is_(True))
        if parent_id:
            query = query.filter(models.Subject.parent_subject_id == parent_id)
        elif root_only:
            query = query.filter(models.Subject.parent_subject_id.is_(None))
        if class_level_id:
            query = query.join(models.SubjectClassMapping).filter(
                models.SubjectClassMapping.class_level_id == class_level_id,
                models.SubjectClassMapping.is_active.is_(True),
            )
        rows = query.order_by(models.Subject.order_index, models.Subject.name_en).all()
        return [subject_out(s) for s in rows]


@router.post("", status_code=201)
def create_subject(payload: SubjectIn):
    with get_session() as db:
        slug = payload.slug or slugify(payload.name_en)
        if not slug:
            raise HTTPException(status_code=400, detail="Could not derive a slug from name_en")
        if _slug_taken(db, slug):
            raise HTTPException(status_code=409, detail=f"Subject with slug '{slug}' already exists")
        if payload.parent_subject_id and not crud.get_subject(db, payload.parent_subject_id):
            raise HTTPException(status_code=400, detail="Parent subject not found")

        subject = models.Subject(**payload.model_dump(exclude={"slug"}), slug=slug)
        db.add(subject)
        db.commit()
        db.refresh(subject)
        logger.info("[Subjects] Created %s", slug)
        return subject_out(subject)


@router.get("/stats")
def subject_stats():
    with get_session() as db:
        active = db.query(models.Subject).filter(models.Subject.is_active.is_(True))
        return {
            "total_categories": active.filter(models.Subject.is_category.is_(True)).count(),
            "root_subjects": active.filter(models.Subject.parent_subject_id.is_(None)).count(),
            "total_chapters": db.query(models.Chapter).filter(models.Chapter.is_active.is_(True)).count(),
            "total_questions": db.query(models.Question).filter(models.Question.is_active.is_(True)).count(),
        }


@router.get("/with-class-counts")
def subjects_with_class_counts():
    with get_session() as db:
        counts = dict(
            db.query(models.SubjectClassMapping.subject_id, func.count(models.SubjectClassMapping.id))
            .filter(models.SubjectClassMapping.is_active.is_(True))
            .group_by(models.SubjectClassMapping.subject_id)
            .all()
        )
        rows = (
            db.query(models.Subject)
            .filter(models.Subject.is_active.is_(True))
            .order_by(models.Subject.order_index, models.Subject.name_en)
            .all()
        )
        return [{**subject_out(s), "class_count": counts.get(s.id, 0)} for s in rows]


# -----------------------------------------------------------------------------
# Single subject
# -----------------------------------------------------------------------------
@router.get("/{slug}")
def get_subject(slug: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        out = subject_out(subject)
        if subject.is_category:
            out["children"] = [
                subject_out(c) for c in sorted(subject.children, key=lambda c: c.order_index or 0)
                if c.is_active
            ]
        return out


@router.patch("/{subject_id}")
def update_subject(subject_id: str, payload: SubjectUpdate):
    with get_session() as db:
        subject = crud.subject_or_404(db, subject_id)
        changes = payload.model_dump(exclude_unset=True)
        if "slug" in changes and _slug_taken(db, changes["slug"], exclude_id=subject.id):
            raise HTTPException(status_code=409, detail=f"Subject with slug '{changes['slug']}' already exists")
        crud.apply_changes(subject, changes)
        db.commit()
        db.refresh(subject)
        return subject_out(subject)


@router.delete("/{subject_id}")
def delete_subject(subject_id: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, subject_id)
        subject.is_active = False
        db.commit()
        logger.info("[Subjects] Deactivated %s", subject.slug)
        return {"id": subject.id, "deleted": True}


@router.get("/{slug}/children")
def list_children(slug: str):
    with get_session() as db:
        parent = crud.subject_or_404(db, slug)
        rows = (
            db.query(models.Subject)
            .filter(models.Subject.parent_subject_id == parent.id, models.Subject.is_active.is_(True))
            .order_by(models.Subject.order_index, models.Subject.name_en)
            .all()
        )
        return [subject_out(s) for s in rows]


@router.post("/{slug}/children", status_code=201)
def create_child(slug: str, payload: ChildSubjectIn):
    with get_session() as db:
        parent = crud.subject_or_404(db, slug)
        if not parent.is_category:
            raise HTTPException(status_code=400, detail="Parent subject is not a category")

        child_slug = f"{parent.slug}-{slugify(payload.name_en)}"
        if _slug_taken(db, child_slug):
            raise HTTPException(status_code=409, detail=f"Subject with slug '{child_slug}' already exists")

        data = payload.model_dump()
        if data["order_index"] is None:
            data["order_index"] = crud.next_order_index(
                db, models.Subject.order_index, models.Subject.parent_subject_id == parent.id
            )
        child = models.Subject(**data, slug=child_slug, parent_subject_id=parent.id)
        db.add(child)
        db.commit()
        db.refresh(child)
        logger.info("[Subjects] Created child %s under %s", child_slug, parent.slug)
        return subject_out(child)


def _first_structure(db, subject_id: str) -> Optional[models.ExamStructure]:
    return (
        db.query(models.ExamStructure)
        .filter(models.ExamStructure.subject_id == subject_id, models.ExamStructure.is_active.is_(True))
        .order_by(models.ExamStructure.order_index, models.ExamStructure.created_at)
        .first()
    )


@router.get("/{slug}/exam-structure")
def subject_exam_structure(slug: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        structure = _first_structure(db, subject.id)
        if not structure:
            return _default_blueprint(subject.id)
        return exam_structure_out(structure)


def _section_question_type(structure: Optional[models.ExamStructure], section: str) -> Optional[str]:
    """
    Section code (or id) of the subject's exam structure -> question type.
    Falls back to the default blueprint codes ("q3", "Section 3") and to a
    bare question type name.
    """
    key = section.strip().lower()
    for s in (structure.sections or []) if structure else []:
        if key in {str(s.get("code") or "").lower(), str(s.get("id") or "").lower()}:
            return normalize_question_type(s.get("question_type"))
    for i, s in enumerate(DEFAULT_SECTIONS, start=1):
        if key in {s["code"], f"section {i}"}:
            return s["question_type"]
    return normalize_question_type(key)


@router.get("/{slug}/section-practice")
def section_practice(slug: str, section: str = "", count: int = Query(20, ge=1, le=100)):
    """Random active questions of one section's type, drawn across all chapters."""
    if not section.strip():
        raise HTTPException(status_code=400, detail="Section name is required")
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        question_type = _section_question_type(_first_structure(db, subject.id), section)
        if not question_type:
            raise HTTPException(status_code=400, detail=f"Unknown section: {section}")
        questions = crud.pick_section_questions(
            db, subject.id, {"question_type": question_type, "question_count": count}
        )
        logger.info("[Practice] %s %s: %d questions", subject.slug, section, len(questions))
        return {
            "section": section,
            "question_type": question_type,
            "questions": [question_out(q) for q in questions],
        }
