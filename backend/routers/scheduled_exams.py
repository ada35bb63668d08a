# routers/scheduled_exams.py
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from sqlalchemy import func

from db import get_session
import models
import crud
from schemas import ScheduledExamIn, ScheduledExamUpdate
from serializers import scheduled_exam_out, question_preview

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduled-exams", tags=["scheduled-exams"])

# statuses students can see
OPEN_STATUSES = ("scheduled", "active")


def _exam_or_404(db, exam_id: str) -> models.ScheduledExam:
    return crud.active_or_404(db, models.ScheduledExam, exam_id, "Scheduled exam")


@router.get("")
def list_scheduled_exams(class_level_id: Optional[str] = None, subject_id: Optional[str] = None,
                         subject_slug: Optional[str] = None, status: Optional[str] = None):
    with get_session() as db:
        query = db.query(models.ScheduledExam).filter(models.ScheduledExam.is_active.is_(True))
        if class_level_id:
            query = query.filter(models.ScheduledExam.class_level_id == class_level_id)
        if subject_slug and not subject_id:
            subject_id = crud.subject_or_404(db, subject_slug).id
        if subject_id:
            query = query.filter(models.ScheduledExam.subject_id == subject_id)
        if status:
            query = query.filter(models.ScheduledExam.status == status)
        rows = query.order_by(models.ScheduledExam.order_index, models.ScheduledExam.created_at).all()
        return [scheduled_exam_out(e, with_relations=True) for e in rows]


@router.post("", status_code=201)
def create_scheduled_exam(payload: ScheduledExamIn):
    with get_session() as db:
        class_level = crud.get_class_level(db, payload.class_level_id)
        if not class_level:
            raise HTTPException(status_code=404, detail="Class level not found")
        subject = crud.subject_or_404(db, payload.subject_id)
        structure = None
        if payload.exam_structure_id:
            structure = crud.active_or_404(db, models.ExamStructure, payload.exam_structure_id, "Exam structure")

        data = payload.model_dump()
        data["class_level_id"], data["subject_id"] = class_level.id, subject.id
        if data["order_index"] is None:
            data["order_index"] = crud.next_order_index(
                db, models.ScheduledExam.order_index,
                models.ScheduledExam.class_level_id == class_level.id,
                models.ScheduledExam.subject_id == subject.id,
            )
        if data["total_marks"] is None:
            data["total_marks"] = structure.total_marks if structure else 100
        if data["duration_minutes"] is None:
            data["duration_minutes"] = structure.duration_minutes if structure else 60

        exam = models.ScheduledExam(**data)
        db.add(exam)
        db.commit()
        db.refresh(exam)
        logger.info("[Scheduled] Created %s for %s / %s", exam.name_en, class_level.slug, subject.slug)
        return scheduled_exam_out(exam, with_relations=True)


@router.get("/counts-by-subject")
def counts_by_subject():
    """{subject_id: number of scheduled or running exams}"""
    with get_session() as db:
        rows = (
            db.query(models.ScheduledExam.subject_id, func.count(models.ScheduledExam.id))
            .filter(models.ScheduledExam.is_active.is_(True), models.ScheduledExam.status.in_(OPEN_STATUSES))
            .group_by(models.ScheduledExam.subject_id)
            .all()
        )
        return dict(rows)


@router.get("/{exam_id}")
def get_scheduled_exam(exam_id: str):
    with get_session() as db:
        return scheduled_exam_out(_exam_or_404(db, exam_id), with_relations=True)


@router.patch("/{exam_id}")
def update_scheduled_exam(exam_id: str, payload: ScheduledExamUpdate):
    with get_session() as db:
        exam = _exam_or_404(db, exam_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("exam_structure_id"):
            crud.active_or_404(db, models.ExamStructure, changes["exam_structure_id"], "Exam structure")
        crud.apply_changes(exam, changes)
        db.commit()
        db.refresh(exam)
        return scheduled_exam_out(exam, with_relations=True)


@router.delete("/{exam_id}")
def delete_scheduled_exam(exam_id: str):
    with get_session() as db:
        exam = _exam_or_404(db, exam_id)
        exam.is_active = False
        db.commit()
        return {"id": exam.id, "deleted": True}


@router.get("/{exam_id}/stats")
def scheduled_exam_stats(exam_id: str):
    with get_session() as db:
        exam = _exam_or_404(db, exam_id)
        attempts = db.query(models.Exam).filter(models.Exam.scheduled_exam_id == exam.id)
        completed = attempts.filter(models.Exam.status == "completed")
        average = completed.with_entities(func.avg(models.Exam.percentage)).scalar()
        return {
            "total_attempts": attempts.count(),
            "completed_attempts": completed.count(),
            "average_percentage": round(float(average), 2) if average is not None else None,
        }


@router.get("/{exam_id}/preview")
def preview_scheduled_exam(exam_id: str):
    """The exam's sections with a sample draw of questions, answers hidden."""
    with get_session() as db:
        exam = _exam_or_404(db, exam_id)
        structure = exam.exam_structure
        if not structure:
            raise HTTPException(status_code=400, detail="No exam structure assigned to this exam")

        sections = []
        for part in crud.assemble_structure(db, exam.subject_id, structure.sections or []):
            sections.append({
                **part["section"],
                "questions": [question_preview(q) for q in part["questions"]],
            })
        return {"exam": scheduled_exam_out(exam), "sections": sections}
