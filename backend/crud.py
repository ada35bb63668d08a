# crud.py
"""Lookups and queries shared by several routers and the seed loader."""
import math
import random
from typing import Dict, Iterable, List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

import models
from utils import alternate_slug


# --- lookups ----------------------------------------------------------------
def get_subject(db: Session, key: str) -> Optional[models.Subject]:
    """Active subject by slug, by the -/_ variant of the slug, or by id."""
    query = db.query(models.Subject).filter(models.Subject.is_active.is_(True))
    subject = query.filter(models.Subject.slug == key).first()
    if not subject:
        subject = query.filter(models.Subject.slug == alternate_slug(key)).first()
    if not subject:
        subject = query.filter(models.Subject.id == key).first()
    return subject


def subject_or_404(db: Session, key: str) -> models.Subject:
    subject = get_subject(db, key)
    if not subject:
        raise HTTPException(status_code=404, detail="Subject not found")
    return subject


def get_class_level(db: Session, key: str) -> Optional[models.ClassLevel]:
    query = db.query(models.ClassLevel).filter(models.ClassLevel.is_active.is_(True))
    return query.filter(models.ClassLevel.id == key).first() or \
        query.filter(models.ClassLevel.slug == key).first()


def active_or_404(db: Session, model, obj_id: str, label: str):
    row = db.query(model).filter(model.id == obj_id, model.is_active.is_(True)).first()
    if not row:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row


def next_order_index(db: Session, column, *criteria) -> int:
    current = db.query(func.max(column)).filter(*criteria).scalar()
    return (current or 0) + 1


def apply_changes(row, changes: dict) -> None:
    for key, value in changes.items():
        setattr(row, key, value)


def paginate(query, page: int, page_size: int, serialize) -> dict:
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {
        "items": [serialize(row) for row in items],
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if page_size else 0,
    }


# --- counts -----------------------------------------------------------------
def active_questions(db: Session, subject_id: str):
    return db.query(models.Question).filter(
        models.Question.subject_id == subject_id,
        models.Question.is_active.is_(True),
    )


def chapter_type_counts(db: Session, subject_id: str, chapter_ids: Optional[Iterable[str]] = None) -> Dict[str, Dict[str, int]]:
    """{chapter_id: {question_type: active question count}}"""
    query = db.query(
        models.Question.chapter_id, models.Question.question_type, func.count(models.Question.id)
    ).filter(
        models.Question.subject_id == subject_id,
        models.Question.is_active.is_(True),
        models.Question.chapter_id.isnot(None),
    )
    if chapter_ids is not None:
        query = query.filter(models.Question.chapter_id.in_(list(chapter_ids)))

    counts: Dict[str, Dict[str, int]] = {}
    for chapter_id, question_type, n in query.group_by(models.Question.chapter_id, models.Question.question_type):
        counts.setdefault(chapter_id, {})[question_type] = n
    return counts


def subject_chapters(db: Session, subject_id: str, chapter_ids: Optional[List[str]] = None) -> List[models.Chapter]:
    query = db.query(models.Chapter).filter(
        models.Chapter.subject_id == subject_id,
        models.Chapter.is_active.is_(True),
    )
    if chapter_ids is not None:
        query = query.filter(models.Chapter.id.in_(chapter_ids))
    return query.order_by(models.Chapter.order_index, models.Chapter.created_at).all()


# --- question assembly ------------------------------------------------------
def _random_pick(query, count: int) -> List[models.Question]:
    rows = query.all()
    if len(rows) <= count:
        random.shuffle(rows)
        return rows
    return random.sample(rows, count)


def pick_section_questions(db: Session, subject_id: str, section: dict) -> List[models.Question]:
    """
    Questions for one section: the hand-picked ids if any, else a random draw
    per configured chapter, else a random draw from the whole subject.
    """
    base = active_questions(db, subject_id)
    selected_ids = section.get("selected_question_ids") or []
    if selected_ids:
        rows = {q.id: q for q in base.filter(models.Question.id.in_(selected_ids))}
        return [rows[qid] for qid in selected_ids if qid in rows]

    question_type = section.get("question_type")
    typed = base.filter(models.Question.question_type == question_type)

    configs = [c for c in (section.get("chapter_configs") or []) if (c.get("question_count") or 0) > 0]
    if configs:
        picked: List[models.Question] = []
        for config in configs:
            chapter_query = typed.filter(models.Question.chapter_id == config["chapter_id"])
            picked.extend(_random_pick(chapter_query, config["question_count"]))
        return picked

    return _random_pick(typed, int(section.get("question_count") or 0))


def assemble_structure(db: Session, subject_id: str, sections: List[dict]) -> List[dict]:
    """[{"section": ..., "questions": [...]}] in section order."""
    ordered = sorted(sections or [], key=lambda s: s.get("order_index") or 0)
    return [
        {"section": section, "questions": pick_section_questions(db, subject_id, section)}
        for section in ordered
    ]


# --- seeding ----------------------------------------------------------------
def get_or_create(db: Session, model, defaults: Optional[dict] = None, **lookup):
    """Returns (row, created). Flushes but does not commit."""
    row = db.query(model).filter_by(**lookup).first()
    if row:
        return row, False
    row = model(**lookup, **(defaults or {}))
    db.add(row)
    db.flush()
    return row, True
