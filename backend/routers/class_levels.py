# routers/class_levels.py
from typing import Optional

from fastapi import APIRouter, HTTPException
from sqlalchemy import func

from db import get_session
import models
import crud
from schemas import ClassLevelIn, ClassLevelUpdate, ClassSubjectIn
from serializers import class_level_out, subject_out, scheduled_exam_out

router = APIRouter(prefix="/class-levels", tags=["class-levels"])


def _class_level_or_404(db, key: str) -> models.ClassLevel:
    class_level = crud.get_class_level(db, key)
    if not class_level:
        raise HTTPException(status_code=404, detail="Class level not found")
    return class_level


def _slug_taken(db, slug: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(models.ClassLevel).filter(models.ClassLevel.slug == slug)
    if exclude_id:
        query = query.filter(models.ClassLevel.id != exclude_id)
    return db.query(query.exists()).scalar()


@router.get("")
def list_class_levels():
    with get_session() as db:
        counts = dict(
            db.query(models.SubjectClassMapping.class_level_id, func.count(models.SubjectClassMapping.id))
            .filter(models.SubjectClassMapping.is_active.is_(True))
            .group_by(models.SubjectClassMapping.class_level_id)
            .all()
        )
        rows = (
            db.query(models.ClassLevel)
            .filter(models.ClassLevel.is_active.is_(True))
            .order_by(models.ClassLevel.order_index)
            .all()
        )
        return [{**class_level_out(c), "subject_count": counts.get(c.id, 0)} for c in rows]


@router.post("", status_code=201)
def create_class_level(payload: ClassLevelIn):
    with get_session() as db:
        if _slug_taken(db, payload.slug):
            raise HTTPException(status_code=409, detail=f"Class level '{payload.slug}' already exists")
        class_level = models.ClassLevel(**payload.model_dump())
        db.add(class_level)
        db.commit()
        db.refresh(class_level)
        return class_level_out(class_level)


@router.get("/{key}")
def get_class_level(key: str):
    with get_session() as db:
        return class_level_out(_class_level_or_404(db, key))


@router.patch("/{key}")
def update_class_level(key: str, payload: ClassLevelUpdate):
    with get_session() as db:
        class_level = _class_level_or_404(db, key)
        changes = payload.model_dump(exclude_unset=True)
        if "slug" in changes and _slug_taken(db, changes["slug"], exclude_id=class_level.id):
            raise HTTPException(status_code=409, detail=f"Class level '{changes['slug']}' already exists")
        crud.apply_changes(class_level, changes)
        db.commit()
        db.refresh(class_level)
        return class_level_out(class_level)


@router.delete("/{key}")
def delete_class_level(key: str):
    with get_session() as db:
        class_level = _class_level_or_404(db, key)
        class_level.is_active = False
        db.commit()
        return {"id": class_level.id, "deleted": True}


# -----------------------------------------------------------------------------
# Subjects taught in a class
# -----------------------------------------------------------------------------
@router.get("/{key}/subjects")
def class_subjects(key: str):
    with get_session() as db:
        class_level = _class_level_or_404(db, key)
        rows = (
            db.query(models.Subject)
            .join(models.SubjectClassMapping)
            .filter(
                models.SubjectClassMapping.class_level_id == class_level.id,
                models.SubjectClassMapping.is_active.is_(True),
                models.Subject.is_active.is_(True),
            )
            .order_by(models.Subject.order_index, models.Subject.name_en)
            .all()
        )
        return [subject_out(s) for s in rows]


@router.post("/{key}/subjects", status_code=201)
def add_class_subject(key: str, payload: ClassSubjectIn):
    with get_session() as db:
        class_level = _class_level_or_404(db, key)
        subject = crud.subject_or_404(db, payload.subject_id)
        mapping = db.query(models.SubjectClassMapping).filter_by(
            subject_id=subject.id, class_level_id=class_level.id
        ).first()
        if mapping and mapping.is_active:
            raise HTTPException(status_code=409, detail="Subject is already mapped to this class")
        if mapping:
            mapping.is_active = True
        else:
            mapping = models.SubjectClassMapping(subject_id=subject.id, class_level_id=class_level.id)
            db.add(mapping)
        db.commit()
        return {"id": mapping.id, "subject_id": subject.id, "class_level_id": class_level.id, "is_active": True}


@router.delete("/{key}/subjects/{subject_id}")
def remove_class_subject(key: str, subject_id: str):
    with get_session() as db:
        class_level = _class_level_or_404(db, key)
        mapping = db.query(models.SubjectClassMapping).filter_by(
            subject_id=subject_id, class_level_id=class_level.id
        ).first()
        if not mapping:
            raise HTTPException(status_code=404, detail="Subject is not mapped to this class")
        db.delete(mapping)
        db.commit()
        return {"subject_id": subject_id, "class_level_id": class_level.id, "deleted": True}


@router.get("/{key}/scheduled-exams")
def class_scheduled_exams(key: str, subject_id: Optional[str] = None, status: Optional[str] = None):
    with get_session() as db:
        class_level = _class_level_or_404(db, key)
        query = db.query(models.ScheduledExam).filter(
            models.ScheduledExam.class_level_id == class_level.id,
            models.ScheduledExam.is_active.is_(True),
        )
        if subject_id:
            query = query.filter(models.ScheduledExam.subject_id == subject_id)
        if status:
            query = query.filter(models.ScheduledExam.status == status)
        rows = query.order_by(models.ScheduledExam.order_index).all()
        return [scheduled_exam_out(e, with_relations=True) for e in rows]
