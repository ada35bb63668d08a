# routers/exams.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from db import get_session
import models
import crud
from grading import check_answer, exam_stats
from schemas import ExamStartIn, AnswersIn
from serializers import exam_out, question_preview

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exams", tags=["exams"])


def _exam_or_404(db, exam_id: str) -> models.Exam:
    exam = db.query(models.Exam).filter(models.Exam.id == exam_id).first()
    if not exam:
        raise HTTPException(status_code=404, detail="Exam not found")
    return exam


def _in_progress(exam: models.Exam):
    if exam.status != "in_progress":
        raise HTTPException(status_code=400, detail=f"Exam is {exam.status}")


@router.get("")
def list_exams(
    user_id: Optional[str] = None,
    subject_id: Optional[str] = None,
    scheduled_exam_id: Optional[str] = None,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    with get_session() as db:
        query = db.query(models.Exam)
        if user_id:
            query = query.filter(models.Exam.user_id == user_id)
        if subject_id:
            query = query.filter(models.Exam.subject_id == subject_id)
        if scheduled_exam_id:
            query = query.filter(models.Exam.scheduled_exam_id == scheduled_exam_id)
        if status:
            query = query.filter(models.Exam.status == status)
        return crud.paginate(query.order_by(models.Exam.started_at.desc()), page, page_size, exam_out)


@router.post("", status_code=201)
def start_exam(payload: ExamStartIn):
    """
    Starts an attempt. Questions are drawn from the exam structure's sections
    and recorded as unanswered rows on the attempt.
    """
    with get_session() as db:
        user = crud.active_or_404(db, models.Profile, payload.user_id, "User")

        scheduled = None
        structure = None
        if payload.scheduled_exam_id:
            scheduled = crud.active_or_404(db, models.ScheduledExam, payload.scheduled_exam_id, "Scheduled exam")
            structure = scheduled.exam_structure
            if scheduled.max_attempts and scheduled.max_attempts > 0:
                used = db.query(models.Exam).filter(
                    models.Exam.user_id == user.id,
                    models.Exam.scheduled_exam_id == scheduled.id,
                    models.Exam.status == "completed",
                ).count()
                if used >= scheduled.max_attempts:
                    raise HTTPException(status_code=400, detail="Maximum attempts reached for this exam")
        if structure is None and payload.exam_structure_id:
            structure = crud.active_or_404(db, models.ExamStructure, payload.exam_structure_id, "Exam structure")

        subject_id = (scheduled.subject_id if scheduled else None) or \
            (structure.subject_id if structure else None) or payload.subject_id
        if not subject_id:
            raise HTTPException(status_code=400, detail="subject_id is required")
        subject = crud.subject_or_404(db, subject_id)

        total_marks = (scheduled.total_marks if scheduled else None) or \
            (structure.total_marks if structure else None)
        exam = models.Exam(
            user_id=user.id,
            subject_id=subject.id,
            exam_structure_id=structure.id if structure else None,
            scheduled_exam_id=scheduled.id if scheduled else None,
            status="in_progress",
            total_marks=total_marks,
        )
        db.add(exam)
        db.flush()

        sections = []
        if structure:
            for part in crud.assemble_structure(db, subject.id, structure.sections or []):
                for q in part["questions"]:
                    db.add(models.ExamAnswer(exam_id=exam.id, question_id=q.id))
                sections.append({
                    **part["section"],
                    "questions": [question_preview(q) for q in part["questions"]],
                })
        db.commit()
        db.refresh(exam)
        logger.info("[Exams] %s started attempt %s", user.id, exam.id)
        return {**exam_out(exam), "sections": sections}


@router.get("/{exam_id}")
def get_exam(exam_id: str):
    with get_session() as db:
        return exam_out(_exam_or_404(db, exam_id), with_answers=True)


@router.post("/{exam_id}/answers")
def save_answers(exam_id: str, payload: AnswersIn):
    with get_session() as db:
        exam = _exam_or_404(db, exam_id)
        _in_progress(exam)

        by_question = {a.question_id: a for a in exam.answers}
        ids = [a.question_id for a in payload.answers]
        known = {qid for (qid,) in db.query(models.Question.id).filter(models.Question.id.in_(ids))}
        unknown = [qid for qid in ids if qid not in known]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown questions: {', '.join(unknown)}")

        for answer in payload.answers:
            row = by_question.get(answer.question_id)
            if row is None:
                row = models.ExamAnswer(exam_id=exam.id, question_id=answer.question_id)
                exam.answers.append(row)
                by_question[answer.question_id] = row
            row.user_answer = answer.user_answer
        db.commit()
        db.refresh(exam)
        return exam_out(exam, with_answers=True)


@router.post("/{exam_id}/submit")
def submit_exam(exam_id: str):
    """Grades every answer and closes the attempt."""
    with get_session() as db:
        exam = _exam_or_404(db, exam_id)
        _in_progress(exam)

        graded = []
        for answer in exam.answers:
            question = answer.question
            is_correct = check_answer(question.question_type, question.answer_data, answer.user_answer)
            answer.is_correct = is_correct
            answer.marks_obtained = (question.marks or 1) if is_correct else 0
            graded.append({
                "user_answer": answer.user_answer,
                "is_correct": is_correct,
                "marks_obtained": answer.marks_obtained,
            })

        total_marks = exam.total_marks or sum((a.question.marks or 1) for a in exam.answers)
        passing = 35
        if exam.exam_structure_id:
            structure = db.query(models.ExamStructure).filter(models.ExamStructure.id == exam.exam_structure_id).first()
            if structure:
                passing = structure.passing_percentage
        stats = exam_stats(graded, total_marks, passing)

        exam.score = stats["obtained_marks"]
        exam.total_marks = total_marks
        exam.percentage = round(stats["obtained_marks"] / total_marks * 100, 2) if total_marks else 0
        exam.status = "completed"
        exam.completed_at = datetime.utcnow()
        db.commit()
        db.refresh(exam)
        logger.info("[Exams] Attempt %s submitted: %s/%s", exam.id, exam.score, exam.total_marks)
        return {**exam_out(exam, with_answers=True), "stats": stats}
