# routers/questions.py
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from sqlalchemy import func

from db import get_session
import models
import crud
from schemas import QuestionIn, QuestionUpdate, ByIdsIn
from serializers import question_out
from utils import sanitize_html, sanitize_search_query

router = APIRouter(tags=["questions"])


def _check_chapter(db, subject_id: str, chapter_id: Optional[str]):
    if not chapter_id:
        return
    chapter = db.query(models.Chapter).filter(models.Chapter.id == chapter_id).first()
    if not chapter or chapter.subject_id != subject_id:
        raise HTTPException(status_code=400, detail="Chapter does not belong to this subject")


def _question_or_404(db, subject_id: str, question_id: str) -> models.Question:
    question = crud.active_questions(db, subject_id).filter(models.Question.id == question_id).first()
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question


@router.get("/subjects/{slug}/questions")
def list_questions(
    slug: str,
    chapter_id: Optional[str] = None,
    difficulty: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        query = crud.active_questions(db, subject.id)
        if chapter_id:
            query = query.filter(models.Question.chapter_id == chapter_id)
        if difficulty:
            query = query.filter(models.Question.difficulty == difficulty)
        if type:
            query = query.filter(models.Question.question_type == type)
        term = sanitize_search_query(search)
        if term:
            query = query.filter(models.Question.question_text.ilike(f"%{term}%"))

        total = query.count()
        rows = query.order_by(models.Question.created_at.desc()).offset(offset).limit(limit).all()
        return {"items": [question_out(q) for q in rows], "total": total, "limit": limit, "offset": offset}


@router.post("/subjects/{slug}/questions", status_code=201)
def create_question(slug: str, payload: QuestionIn):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        _check_chapter(db, subject.id, payload.chapter_id)

        data = payload.model_dump()
        data["question_text"] = sanitize_html(data["question_text"])
        data["explanation"] = sanitize_html(data["explanation"])
        question = models.Question(**data, subject_id=subject.id)
        db.add(question)
        db.commit()
        db.refresh(question)
        return question_out(question)


@router.get("/subjects/{slug}/questions/stats")
def question_stats(slug: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        base = crud.active_questions(db, subject.id)

        def grouped(column):
            return dict(base.with_entities(column, func.count(models.Question.id)).group_by(column).all())

        return {
            "total": base.count(),
            "by_type": grouped(models.Question.question_type),
            "by_difficulty": grouped(models.Question.difficulty),
            "without_chapter": base.filter(models.Question.chapter_id.is_(None)).count(),
        }


@router.post("/subjects/{slug}/questions/by-ids")
def questions_by_ids(slug: str, payload: ByIdsIn):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        if not payload.ids:
            return []
        rows = {
            q.id: q for q in crud.active_questions(db, subject.id).filter(models.Question.id.in_(payload.ids))
        }
        return [question_out(rows[qid]) for qid in payload.ids if qid in rows]


@router.get("/subjects/{slug}/questions/{question_id}")
def get_question(slug: str, question_id: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        return question_out(_question_or_404(db, subject.id, question_id))


@router.patch("/subjects/{slug}/questions/{question_id}")
def update_question(slug: str, question_id: str, payload: QuestionUpdate):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        question = _question_or_404(db, subject.id, question_id)
        changes = payload.model_dump(exclude_unset=True)
        if "chapter_id" in changes:
            _check_chapter(db, subject.id, changes["chapter_id"])
        for field in ("question_text", "explanation"):
            if field in changes:
                changes[field] = sanitize_html(changes[field])
        crud.apply_changes(question, changes)
        db.commit()
        db.refresh(question)
        return question_out(question)


@router.delete("/subjects/{slug}/questions/{question_id}")
def delete_question(slug: str, question_id: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        question = _question_or_404(db, subject.id, question_id)
        question.is_active = False
        db.commit()
        return {"id": question.id, "deleted": True}


@router.get("/questions/search")
def search_questions(q: str = "", subject: Optional[str] = None, limit: int = Query(10, ge=1, le=20)):
    """Searches question text across all subjects (or one)."""
    term = sanitize_search_query(q)
    if len(term) < 2:
        return []
    with get_session() as db:
        query = db.query(models.Question).filter(
            models.Question.is_active.is_(True),
            models.Question.question_text.ilike(f"%{term}%"),
        )
        if subject:
            query = query.filter(models.Question.subject_id == crud.subject_or_404(db, subject).id)
        rows = query.order_by(models.Question.created_at.desc()).limit(limit).all()
        return [{**question_out(r), "subject_slug": r.subject.slug if r.subject else None} for r in rows]
