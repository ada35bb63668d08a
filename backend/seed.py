# seed.py
"""
Loads the fixture rows from seed_data.py. Every step looks rows up by their
natural key first, so running the seed again adds nothing.

    examdesk-seed          (or: python seed.py)
"""
import logging
from datetime import date, timedelta

from db import get_session, init_db
import models
from crud import get_or_create
from section_editor import section_totals
from utils import normalize_school_name
import seed_data

logger = logging.getLogger(__name__)


def seed_subjects(db):
    created = 0
    for row in seed_data.SUBJECTS:
        fields = {k: v for k, v in row.items() if k not in ("slug", "parent")}
        if row.get("parent"):
            parent = db.query(models.Subject).filter_by(slug=row["parent"]).one()
            fields["parent_subject_id"] = parent.id
        _, new = get_or_create(db, models.Subject, defaults=fields, slug=row["slug"])
        created += new
    return created


def seed_class_levels(db):
    created = 0
    for row in seed_data.CLASS_LEVELS:
        fields = {k: v for k, v in row.items() if k != "slug"}
        _, new = get_or_create(db, models.ClassLevel, defaults=fields, slug=row["slug"])
        created += new
    return created


def seed_subject_class_mappings(db):
    created = 0
    for subject_slug, class_slugs in seed_data.SUBJECT_CLASSES.items():
        subject = db.query(models.Subject).filter_by(slug=subject_slug).one()
        for class_slug in class_slugs:
            class_level = db.query(models.ClassLevel).filter_by(slug=class_slug).one()
            _, new = get_or_create(
                db, models.SubjectClassMapping, subject_id=subject.id, class_level_id=class_level.id
            )
            created += new
    return created


def seed_chapters(db):
    created = 0
    for subject_slug, chapters in seed_data.CHAPTERS.items():
        subject = db.query(models.Subject).filter_by(slug=subject_slug).one()
        for index, (name_en, name_mr) in enumerate(chapters, start=1):
            _, new = get_or_create(
                db, models.Chapter, defaults={"name_mr": name_mr, "order_index": index},
                subject_id=subject.id, name_en=name_en,
            )
            created += new
    return created


def seed_schools(db):
    created = 0
    for row in seed_data.SCHOOLS:
        fields = {k: v for k, v in row.items() if k not in ("name", "location_city")}
        _, new = get_or_create(
            db, models.School, defaults={**fields, "name": row["name"]},
            name_search=normalize_school_name(row["name"]), location_city=row["location_city"],
        )
        created += new
    return created


def seed_users(db):
    created = 0
    for row in seed_data.USERS:
        fields = {k: v for k, v in row.items() if k not in ("email", "school")}
        if row.get("school"):
            school = db.query(models.School).filter_by(name_search=normalize_school_name(row["school"])).one()
            fields["school_id"] = school.id
        _, new = get_or_create(db, models.Profile, defaults=fields, email=row["email"])
        if new and fields.get("school_id"):
            school.student_count = (school.student_count or 0) + 1
        created += new
    return created


def seed_questions(db):
    created = 0
    for subject_slug, chapter_name, fields in seed_data.QUESTIONS:
        subject = db.query(models.Subject).filter_by(slug=subject_slug).one()
        chapter = db.query(models.Chapter).filter_by(subject_id=subject.id, name_en=chapter_name).one()
        defaults = {k: v for k, v in fields.items() if k != "question_text"}
        defaults["chapter_id"] = chapter.id
        _, new = get_or_create(
            db, models.Question, defaults=defaults,
            subject_id=subject.id, question_text=fields["question_text"],
        )
        created += new
    return created


def seed_exam_structures(db):
    created = 0
    for row in seed_data.EXAM_STRUCTURES:
        subject = db.query(models.Subject).filter_by(slug=row["subject"]).one()
        class_level = db.query(models.ClassLevel).filter_by(slug=row["class_level"]).one()
        fields = {k: v for k, v in row.items() if k not in ("subject", "class_level", "name_en")}
        fields["total_questions"], fields["total_marks"] = section_totals(row["sections"])
        fields["class_level_id"] = class_level.id
        fields["class_level"] = class_level.slug
        _, new = get_or_create(
            db, models.ExamStructure, defaults=fields, subject_id=subject.id, name_en=row["name_en"],
        )
        created += new
    return created


def seed_scheduled_exams(db, today=None):
    today = today or date.today()
    created = 0
    order = {}
    for row in seed_data.SCHEDULED_EXAMS:
        structure = db.query(models.ExamStructure).filter_by(name_en=row["structure"]).one()
        key = (structure.class_level_id, structure.subject_id)
        order[key] = order.get(key, 0) + 1
        fields = {
            "class_level_id": structure.class_level_id,
            "subject_id": structure.subject_id,
            "name_mr": row["name_mr"],
            "total_marks": structure.total_marks,
            "duration_minutes": structure.duration_minutes,
            "status": row["status"],
            "order_index": order[key],
            "max_attempts": row.get("max_attempts", 0),
            "scheduled_time": row.get("scheduled_time"),
        }
        if "day_offset" in row:
            fields["scheduled_date"] = (today + timedelta(days=row["day_offset"])).isoformat()
        _, new = get_or_create(
            db, models.ScheduledExam, defaults=fields,
            exam_structure_id=structure.id, name_en=row["name_en"],
        )
        created += new
    return created


# Dependency order: later steps look up rows made by earlier ones
SEEDS = [
    ("subjects", seed_subjects),
    ("class levels", seed_class_levels),
    ("subject-class mappings", seed_subject_class_mappings),
    ("chapters", seed_chapters),
    ("schools", seed_schools),
    ("users", seed_users),
    ("questions", seed_questions),
    ("exam structures", seed_exam_structures),
    ("scheduled exams", seed_scheduled_exams),
]


def seed_all() -> dict:
    """Runs every seed step in one transaction. Returns {step: rows created}."""
    init_db()
    report = {}
    with get_session() as db:
        for name, step in SEEDS:
            report[name] = step(db)
            logger.info("[Seed] %s: %d new", name, report[name])
        db.commit()
    return report


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    report = seed_all()
    logger.info("[Seed] Done: %d rows created", sum(report.values()))


if __name__ == "__main__":
    main()
