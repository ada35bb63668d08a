# serializers.py
"""ORM rows to the snake_case dicts returned by the API."""
import models


def _iso(value):
    return value.isoformat() if value else None


def subject_out(s: models.Subject) -> dict:
    return {
        "id": s.id,
        "parent_subject_id": s.parent_subject_id,
        "name_en": s.name_en,
        "name_mr": s.name_mr,
        "slug": s.slug,
        "description_en": s.description_en,
        "description_mr": s.description_mr,
        "icon": s.icon,
        "order_index": s.order_index,
        "is_active": s.is_active,
        "is_category": s.is_category,
        "is_paper": s.is_paper,
        "paper_number": s.paper_number,
        "created_at": _iso(s.created_at),
        "updated_at": _iso(s.updated_at),
    }


def class_level_out(c: models.ClassLevel) -> dict:
    return {
        "id": c.id,
        "name_en": c.name_en,
        "name_mr": c.name_mr,
        "slug": c.slug,
        "description_en": c.description_en,
        "description_mr": c.description_mr,
        "order_index": c.order_index,
        "is_active": c.is_active,
        "created_at": _iso(c.created_at),
    }


def chapter_out(c: models.Chapter) -> dict:
    return {
        "id": c.id,
        "subject_id": c.subject_id,
        "name_en": c.name_en,
        "name_mr": c.name_mr,
        "description_en": c.description_en,
        "description_mr": c.description_mr,
        "order_index": c.order_index,
        "is_active": c.is_active,
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }


def question_out(q: models.Question) -> dict:
    return {
        "id": q.id,
        "subject_id": q.subject_id,
        "chapter_id": q.chapter_id,
        "question_text": q.question_text,
        "question_language": q.question_language,
        "question_type": q.question_type,
        "difficulty": q.difficulty,
        "answer_data": q.answer_data,
        "explanation": q.explanation,
        "tags": q.tags or [],
        "class_level": q.class_level,
        "marks": q.marks,
        "is_active": q.is_active,
        "created_by": q.created_by,
        "created_at": _iso(q.created_at),
        "updated_at": _iso(q.updated_at),
    }


def question_preview(q: models.Question) -> dict:
    """Question without its answers, as a student would see it."""
    out = question_out(q)
    data = q.answer_data or {}
    if "options" in data:
        out["answer_data"] = {"options": data["options"]}
    elif q.question_type == "true_false":
        out["answer_data"] = {"type": "true_false"}
    elif "blanks" in data:
        out["answer_data"] = {"blank_count": len(data["blanks"]) or 1}
    elif "pairs" in data:
        pairs = data["pairs"]
        out["answer_data"] = {
            "type": "match",
            "left_column": [p.get("left") for p in pairs],
            # sorted so the column order gives nothing away
            "right_column": sorted(str(p.get("right") or "") for p in pairs),
        }
    else:
        out["answer_data"] = {}
    out.pop("explanation")
    return out


def exam_structure_out(e: models.ExamStructure) -> dict:
    return {
        "id": e.id,
        "subject_id": e.subject_id,
        "class_level_id": e.class_level_id,
        "name_en": e.name_en,
        "name_mr": e.name_mr,
        "description_en": e.description_en,
        "description_mr": e.description_mr,
        "class_level": e.class_level,
        "duration_minutes": e.duration_minutes,
        "total_questions": e.total_questions,
        "total_marks": e.total_marks,
        "passing_percentage": e.passing_percentage,
        "sections": e.sections or [],
        "is_template": e.is_template,
        "order_index": e.order_index,
        "is_active": e.is_active,
        "created_at": _iso(e.created_at),
        "updated_at": _iso(e.updated_at),
    }


def scheduled_exam_out(e: models.ScheduledExam, with_relations: bool = False) -> dict:
    out = {
        "id": e.id,
        "class_level_id": e.class_level_id,
        "subject_id": e.subject_id,
        "exam_structure_id": e.exam_structure_id,
        "name_en": e.name_en,
        "name_mr": e.name_mr,
        "description_en": e.description_en,
        "description_mr": e.description_mr,
        "total_marks": e.total_marks,
        "duration_minutes": e.duration_minutes,
        "scheduled_date": e.scheduled_date,
        "scheduled_time": e.scheduled_time,
        "status": e.status,
        "order_index": e.order_index,
        "is_active": e.is_active,
        "publish_results": e.publish_results,
        "max_attempts": e.max_attempts,
        "created_at": _iso(e.created_at),
        "updated_at": _iso(e.updated_at),
    }
    if with_relations:
        out["subject"] = subject_out(e.subject) if e.subject else None
        out["class_level"] = class_level_out(e.class_level) if e.class_level else None
        out["exam_structure"] = exam_structure_out(e.exam_structure) if e.exam_structure else None
    return out


def exam_answer_out(a: models.ExamAnswer) -> dict:
    return {
        "id": a.id,
        "exam_id": a.exam_id,
        "question_id": a.question_id,
        "user_answer": a.user_answer,
        "is_correct": a.is_correct,
        "marks_obtained": a.marks_obtained,
    }


def exam_out(e: models.Exam, with_answers: bool = False) -> dict:
    out = {
        "id": e.id,
        "user_id": e.user_id,
        "subject_id": e.subject_id,
        "exam_structure_id": e.exam_structure_id,
        "scheduled_exam_id": e.scheduled_exam_id,
        "status": e.status,
        "score": e.score,
        "total_marks": e.total_marks,
        "percentage": e.percentage,
        "started_at": _iso(e.started_at),
        "completed_at": _iso(e.completed_at),
    }
    if with_answers:
        out["answers"] = [exam_answer_out(a) for a in e.answers]
    return out


def school_out(s: models.School) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "name_search": s.name_search,
        "location_city": s.location_city,
        "location_state": s.location_state,
        "location_country": s.location_country,
        "address": s.address,
        "type": s.type,
        "level": s.level,
        "founded_year": s.founded_year,
        "is_verified": s.is_verified,
        "is_user_added": s.is_user_added,
        "student_count": s.student_count,
        "created_at": _iso(s.created_at),
    }


def profile_out(p: models.Profile) -> dict:
    return {
        "id": p.id,
        "email": p.email,
        "phone": p.phone,
        "name": p.name,
        "avatar_url": p.avatar_url,
        "school_id": p.school_id,
        "class_level": p.class_level,
        "role": p.role,
        "permissions": p.permissions or {},
        "preferred_language": p.preferred_language,
        "is_active": p.is_active,
        "created_at": _iso(p.created_at),
    }


def import_batch_out(b: models.QuestionImportBatch) -> dict:
    return {
        "id": b.id,
        "subject_slug": b.subject_slug,
        "batch_name": b.batch_name,
        "status": b.status,
        "parsed_questions": b.parsed_questions or [],
        "questions_count": len(b.parsed_questions or []),
        "metadata": b.meta or {},
        "created_by": b.created_by,
        "created_at": _iso(b.created_at),
        "imported_at": _iso(b.imported_at),
    }
