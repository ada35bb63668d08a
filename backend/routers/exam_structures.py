# routers/exam_structures.py
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from db import get_session
import models
import crud
from schemas import ExamStructureIn, ExamStructureUpdate, SectionIn
from section_editor import SectionDraft, SectionValidationError, apply_section, section_totals
from serializers import exam_structure_out
from utils import snake_keys

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exam-structures", tags=["exam-structures"])


def _structure_or_404(db, structure_id: str) -> models.ExamStructure:
    return crud.active_or_404(db, models.ExamStructure, structure_id, "Exam structure")


def _check_rules(duration_minutes: int, total_marks: int, passing_percentage: int):
    if duration_minutes <= 0:
        raise HTTPException(status_code=400, detail="duration_minutes must be greater than 0")
    if total_marks <= 0:
        raise HTTPException(status_code=400, detail="total_marks must be greater than 0")
    if not 0 <= passing_percentage <= 100:
        raise HTTPException(status_code=400, detail="passing_percentage must be between 0 and 100")


def _clean_sections(sections: list) -> list:
    """Runs every section through the editor so ids, codes and totals are filled in."""
    cleaned = []
    for index, section in enumerate(sections, start=1):
        try:
            cleaned.append(SectionDraft(snake_keys(section), order_index=index).to_section())
        except SectionValidationError as e:
            raise HTTPException(status_code=400, detail=f"Section {index}: {e}")
    return cleaned


@router.get("")
def list_structures(subject_id: Optional[str] = None, class_level_id: Optional[str] = None,
                    is_template: Optional[bool] = None):
    with get_session() as db:
        query = db.query(models.ExamStructure).filter(models.ExamStructure.is_active.is_(True))
        if subject_id:
            query = query.filter(models.ExamStructure.subject_id == subject_id)
        if class_level_id:
            query = query.filter(models.ExamStructure.class_level_id == class_level_id)
        if is_template is not None:
            query = query.filter(models.ExamStructure.is_template.is_(is_template))
        rows = query.order_by(models.ExamStructure.order_index, models.ExamStructure.name_en).all()
        return [exam_structure_out(s) for s in rows]


@router.post("", status_code=201)
def create_structure(payload: ExamStructureIn):
    with get_session() as db:
        subject = crud.subject_or_404(db, payload.subject_id)
        if payload.class_level_id and not crud.get_class_level(db, payload.class_level_id):
            raise HTTPException(status_code=404, detail="Class level not found")

        data = payload.model_dump()
        data["subject_id"] = subject.id
        if data["sections"]:
            data["sections"] = _clean_sections(data["sections"])
            data["total_questions"], data["total_marks"] = section_totals(data["sections"])
        _check_rules(data["duration_minutes"], data["total_marks"], data["passing_percentage"])

        structure = models.ExamStructure(**data)
        db.add(structure)
        db.commit()
        db.refresh(structure)
        logger.info("[Structures] Created %s (%d sections)", structure.name_en, len(structure.sections or []))
        return exam_structure_out(structure)


@router.get("/available")
def available_structures(subject_id: Optional[str] = None, class_level_id: Optional[str] = None):
    """Structures usable for a subject, optionally narrowed to a class (or class-agnostic)."""
    if not subject_id:
        raise HTTPException(status_code=400, detail="subject_id is required")
    with get_session() as db:
        query = db.query(models.ExamStructure).filter(
            models.ExamStructure.subject_id == subject_id,
            models.ExamStructure.is_active.is_(True),
        )
        if class_level_id:
            query = query.filter(
                (models.ExamStructure.class_level_id.is_(None))
                | (models.ExamStructure.class_level_id == class_level_id)
            )
        rows = query.order_by(models.ExamStructure.order_index).all()
        return [
            {
                "id": s.id,
                "name_en": s.name_en,
                "name_mr": s.name_mr,
                "total_marks": s.total_marks,
                "total_questions": s.total_questions,
                "duration_minutes": s.duration_minutes,
                "sections": s.sections or [],
            }
            for s in rows
        ]


@router.get("/{structure_id}")
def get_structure(structure_id: str):
    with get_session() as db:
        return exam_structure_out(_structure_or_404(db, structure_id))


@router.patch("/{structure_id}")
def update_structure(structure_id: str, payload: ExamStructureUpdate):
    with get_session() as db:
        structure = _structure_or_404(db, structure_id)
        changes = payload.model_dump(exclude_unset=True)
        if "subject_id" in changes:
            changes["subject_id"] = crud.subject_or_404(db, changes["subject_id"]).id
        if "sections" in changes:
            changes["sections"] = _clean_sections(changes["sections"])
            if changes["sections"]:
                changes["total_questions"], changes["total_marks"] = section_totals(changes["sections"])
            else:
                # without sections the totals have to come with the request
                changes.setdefault("total_questions", 0)
                changes.setdefault("total_marks", 0)
        _check_rules(
            changes.get("duration_minutes", structure.duration_minutes),
            changes.get("total_marks", structure.total_marks),
            changes.get("passing_percentage", structure.passing_percentage),
        )
        crud.apply_changes(structure, changes)
        db.commit()
        db.refresh(structure)
        return exam_structure_out(structure)


@router.delete("/{structure_id}")
def delete_structure(structure_id: str):
    with get_session() as db:
        structure = _structure_or_404(db, structure_id)
        structure.is_active = False
        db.commit()
        return {"id": structure.id, "deleted": True}


# -----------------------------------------------------------------------------
# Section editor
# -----------------------------------------------------------------------------
def _section_at(structure: models.ExamStructure, index: int) -> Optional[dict]:
    sections = structure.sections or []
    if index < 0 or index > len(sections):
        raise HTTPException(status_code=404, detail="Section not found")
    return sections[index] if index < len(sections) else None


@router.get("/{structure_id}/sections/{index}")
def get_section(structure_id: str, index: int):
    """
    Returns the section at `index` with the editor's step flags. index equal
    to the number of sections gives an empty draft for a new section.
    """
    with get_session() as db:
        structure = _structure_or_404(db, structure_id)
        existing = _section_at(structure, index)
        draft = SectionDraft(existing, order_index=index + 1)
        return {
            "index": index,
            "is_new": existing is None,
            "section": existing or {},
            "total_marks": draft.total_marks,
            "steps": draft.step_status(),
        }


@router.put("/{structure_id}/sections/{index}")
def save_section(structure_id: str, index: int, payload: SectionIn):
    with get_session() as db:
        structure = _structure_or_404(db, structure_id)
        existing = _section_at(structure, index)

        changes = payload.model_dump(exclude_unset=True)
        if "chapter_configs" in changes and changes["chapter_configs"]:
            chapter_ids = [c["chapter_id"] for c in changes["chapter_configs"]]
            known = {c.id for c in crud.subject_chapters(db, structure.subject_id, chapter_ids)}
            unknown = [cid for cid in chapter_ids if cid not in known]
            if unknown:
                raise HTTPException(status_code=400, detail=f"Unknown chapters: {', '.join(unknown)}")

        try:
            draft = SectionDraft(existing, order_index=index + 1)
            draft.update(**changes)
            section = draft.to_section()
        except SectionValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        try:
            sections, total_questions, total_marks = apply_section(structure.sections or [], index, section)
        except IndexError as e:
            raise HTTPException(status_code=404, detail=str(e))
        structure.sections = sections
        structure.total_questions = total_questions
        structure.total_marks = total_marks
        db.commit()
        db.refresh(structure)
        return exam_structure_out(structure)
