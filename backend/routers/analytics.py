# routers/analytics.py
import calendar
from datetime import datetime, timedelta
from typing import List, Tuple

from fastapi import APIRouter, Query
from sqlalchemy import case, distinct, func

from db import get_session
import models
from serializers import exam_out

router = APIRouter(prefix="/analytics", tags=["analytics"])

PASS_PERCENTAGE = 35


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0


def _growth(added: int, base: int) -> float:
    if not base:
        return 100.0 if added else 0
    return round(added / base * 100, 2)


def _average(value) -> float:
    return round(float(value), 2) if value is not None else 0


def _months_back(now: datetime, months: int) -> List[Tuple[int, int]]:
    """(year, month) pairs ending with the month of `now`, oldest first."""
    pairs = []
    year, month = now.year, now.month
    for _ in range(months):
        pairs.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return pairs[::-1]


@router.get("/dashboard-stats")
def dashboard_stats():
    with get_session() as db:
        exams = db.query(models.Exam)
        completed = exams.filter(models.Exam.status == "completed")
        completed_count = completed.count()
        total_exams = exams.count()
        passed = completed.filter(models.Exam.percentage >= PASS_PERCENTAGE).count()
        average = completed.with_entities(func.avg(models.Exam.percentage)).scalar()

        questions = db.query(models.Question).filter(models.Question.is_active.is_(True))
        by_difficulty = dict(
            questions.with_entities(models.Question.difficulty, func.count(models.Question.id))
            .group_by(models.Question.difficulty)
            .all()
        )
        by_subject = (
            db.query(models.Subject.name_en, func.count(models.Question.id))
            .join(models.Question, models.Question.subject_id == models.Subject.id)
            .filter(models.Question.is_active.is_(True))
            .group_by(models.Subject.name_en)
            .order_by(func.count(models.Question.id).desc())
            .limit(5)
            .all()
        )

        return {
            "total_users": db.query(models.Profile).count(),
            "active_students": db.query(models.Profile).filter(
                models.Profile.role == "student", models.Profile.is_active.is_(True)
            ).count(),
            "total_exams": total_exams,
            "completed_exams": completed_count,
            "total_questions": questions.count(),
            "average_score": round(float(average), 2) if average is not None else 0,
            "pass_rate": _rate(passed, completed_count),
            "completion_rate": _rate(completed_count, total_exams),
            "questions_by_difficulty": [
                {"difficulty": d, "count": by_difficulty.get(d, 0)} for d in models.DIFFICULTIES
            ],
            "questions_by_subject": [{"subject": name, "count": n} for name, n in by_subject],
        }


@router.get("/subject-analytics")
def subject_analytics():
    """Per subject: question count, attempts and average score, busiest first."""
    with get_session() as db:
        question_counts = dict(
            db.query(models.Question.subject_id, func.count(models.Question.id))
            .filter(models.Question.is_active.is_(True))
            .group_by(models.Question.subject_id)
            .all()
        )
        exam_rows = (
            db.query(models.Exam.subject_id, func.count(models.Exam.id), func.avg(models.Exam.percentage))
            .group_by(models.Exam.subject_id)
            .all()
        )
        exam_stats = {sid: (n, avg) for sid, n, avg in exam_rows}

        subjects = (
            db.query(models.Subject)
            .filter(models.Subject.is_active.is_(True), models.Subject.is_category.is_(False))
            .all()
        )
        out = []
        for s in subjects:
            attempts, average = exam_stats.get(s.id, (0, None))
            out.append({
                "subject_id": s.id,
                "subject": s.name_en,
                "slug": s.slug,
                "total_questions": question_counts.get(s.id, 0),
                "total_exams": attempts,
                "average_score": round(float(average)) if average is not None else 0,
            })
        return sorted(out, key=lambda row: (-row["total_exams"], row["subject"]))


@router.get("/kpi-metrics")
def kpi_metrics(days: int = Query(30, ge=1, le=365)):
    """
    Growth figures for the last `days` days against the period before it.
    previous_period holds the totals as they stood when the window opened.
    """
    now = datetime.utcnow()
    since = now - timedelta(days=days)
    before = since - timedelta(days=days)
    with get_session() as db:
        profiles = db.query(models.Profile)
        total_users = profiles.count()
        new_users = profiles.filter(models.Profile.created_at >= since).count()
        students = profiles.filter(models.Profile.role == "student").count()
        active_students = (
            db.query(func.count(distinct(models.Exam.user_id)))
            .join(models.Profile, models.Exam.user_id == models.Profile.id)
            .filter(models.Profile.role == "student", models.Exam.created_at >= since)
            .scalar()
        )

        exams = db.query(models.Exam)
        total_exams = exams.count()
        new_exams = exams.filter(models.Exam.created_at >= since).count()
        prior_exams = exams.filter(models.Exam.created_at >= before, models.Exam.created_at < since).count()
        earlier = exams.filter(models.Exam.created_at < since)
        earlier_completed = earlier.filter(models.Exam.status == "completed")

        by_type = dict(
            db.query(models.Question.question_type, func.count(models.Question.id))
            .filter(models.Question.is_active.is_(True))
            .group_by(models.Question.question_type)
            .all()
        )

        return {
            "student_retention_rate": _rate(active_students, students),
            "avg_exams_per_student": round(total_exams / students, 2) if students else 0,
            "monthly_enrollment_growth": _growth(new_users, total_users - new_users),
            "monthly_exam_growth": _growth(new_exams - prior_exams, prior_exams),
            "previous_period": {
                "total_users": total_users - new_users,
                "total_exams": earlier.count(),
                "completed_exams": earlier_completed.count(),
                "average_score": _average(
                    earlier_completed.with_entities(func.avg(models.Exam.percentage)).scalar()
                ),
                "new_users": profiles.filter(
                    models.Profile.created_at >= before, models.Profile.created_at < since
                ).count(),
            },
            "question_type_breakdown": [
                {"question_type": t, "count": by_type.get(t, 0)} for t in models.QUESTION_TYPES
            ],
        }


@router.get("/monthly-trends")
def monthly_trends(months: int = Query(6, ge=1, le=24)):
    """Student sign-ups, attempts and completions per calendar month."""
    buckets = _months_back(datetime.utcnow(), months)
    start = datetime(buckets[0][0], buckets[0][1], 1)
    rows = {
        key: {"month": calendar.month_abbr[key[1]], "year": key[0], "enrollments": 0, "exams": 0, "completions": 0}
        for key in buckets
    }
    with get_session() as db:
        signups = db.query(models.Profile.created_at).filter(
            models.Profile.role == "student", models.Profile.created_at >= start
        )
        for (created_at,) in signups:
            rows[(created_at.year, created_at.month)]["enrollments"] += 1

        attempts = db.query(models.Exam.created_at, models.Exam.status).filter(models.Exam.created_at >= start)
        for created_at, status in attempts:
            row = rows[(created_at.year, created_at.month)]
            row["exams"] += 1
            if status == "completed":
                row["completions"] += 1
    return [rows[key] for key in buckets]


@router.get("/recent-activity")
def recent_activity(limit: int = Query(5, ge=1, le=50)):
    with get_session() as db:
        exams = db.query(models.Exam).order_by(models.Exam.created_at.desc()).limit(limit).all()
        out = []
        for e in exams:
            row = exam_out(e)
            row["user"] = {
                "id": e.user_id,
                "name": e.user.name if e.user else None,
                "email": e.user.email if e.user else None,
                "avatar_url": e.user.avatar_url if e.user else None,
            }
            row["subject"] = {"id": e.subject_id, "name_en": e.subject.name_en} if e.subject else None
            row["exam_structure"] = (
                {"id": e.exam_structure_id, "name_en": e.exam_structure.name_en} if e.exam_structure else None
            )
            row["scheduled_exam"] = (
                {"id": e.scheduled_exam_id, "name_en": e.scheduled_exam.name_en} if e.scheduled_exam else None
            )
            out.append(row)
        return out


@router.get("/class-level-analytics")
def class_level_analytics():
    """Per active class level: students, attempts, average score and pass rate, largest classes first."""
    with get_session() as db:
        students = dict(
            db.query(models.Profile.class_level, func.count(models.Profile.id))
            .filter(models.Profile.role == "student", models.Profile.is_active.is_(True))
            .group_by(models.Profile.class_level)
            .all()
        )
        attempt_rows = (
            db.query(
                models.Profile.class_level,
                func.count(models.Exam.id),
                func.avg(models.Exam.percentage),
                func.sum(case((models.Exam.percentage >= PASS_PERCENTAGE, 1), else_=0)),
                func.count(models.Exam.percentage),
            )
            .join(models.Profile, models.Exam.user_id == models.Profile.id)
            .group_by(models.Profile.class_level)
            .all()
        )
        attempts = {level: (n, avg, passed or 0, graded) for level, n, avg, passed, graded in attempt_rows}

        levels = (
            db.query(models.ClassLevel)
            .filter(models.ClassLevel.is_active.is_(True))
            .order_by(models.ClassLevel.order_index, models.ClassLevel.slug)
            .all()
        )
        out = []
        for level in levels:
            total, average, passed, graded = attempts.get(level.slug, (0, None, 0, 0))
            out.append({
                "class_level_id": level.id,
                "class_level": level.name_en,
                "slug": level.slug,
                "total_students": students.get(level.slug, 0),
                "total_exams": total,
                "average_score": round(float(average)) if average is not None else 0,
                "pass_rate": round(_rate(passed, graded)),
            })
        return sorted(out, key=lambda row: -row["total_students"])
