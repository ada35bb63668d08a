# models.py
import uuid
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, Float, ForeignKey, JSON, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from db import Base

QUESTION_TYPES = (
    "fill_blank",
    "true_false",
    "mcq_single",
    "mcq_two",
    "mcq_three",
    "match",
    "short_answer",
    "long_answer",
    "programming",
)
DIFFICULTIES = ("easy", "medium", "hard")
SCHEDULED_EXAM_STATUSES = ("draft", "scheduled", "active", "completed", "archived", "cancelled")
EXAM_STATUSES = ("in_progress", "completed", "abandoned")
IMPORT_BATCH_STATUSES = ("pending", "reviewed", "imported", "cancelled")
ROLES = ("student", "teacher", "admin", "super_admin")
LANGUAGES = ("en", "mr")


def new_id() -> str:
    return str(uuid.uuid4())


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, index=True)
    phone = Column(String(20), unique=True, index=True)
    name = Column(String(200))
    avatar_url = Column(String(1024))
    school_id = Column(String(36), ForeignKey("schools.id", ondelete="SET NULL"), index=True)
    class_level = Column(String(20))
    role = Column(String(20), nullable=False, default="student")
    permissions = Column(JSON, default=dict)
    preferred_language = Column(String(2), default="en")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    school = relationship("School", back_populates="students", foreign_keys=[school_id])


class School(Base):
    __tablename__ = "schools"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(300), nullable=False)
    name_search = Column(String(300), nullable=False, index=True)  # lower-cased, single-spaced
    location_city = Column(String(100))
    location_state = Column(String(100))
    location_country = Column(String(100), default="India")
    address = Column(Text)
    type = Column(String(50))
    level = Column(String(50))
    founded_year = Column(String(4))
    is_verified = Column(Boolean, default=False)
    is_user_added = Column(Boolean, default=False)
    created_by = Column(String(36))
    student_count = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    students = relationship("Profile", back_populates="school", foreign_keys="Profile.school_id")


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(String(36), primary_key=True, default=new_id)
    parent_subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), index=True)
    name_en = Column(String(200), nullable=False)
    name_mr = Column(String(200), nullable=False)
    slug = Column(String(100), unique=True, index=True, nullable=False)
    description_en = Column(Text)
    description_mr = Column(Text)
    icon = Column(String(50))
    order_index = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    is_category = Column(Boolean, default=False)
    is_paper = Column(Boolean, default=False)
    paper_number = Column(String(10))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    parent = relationship("Subject", remote_side=[id], back_populates="children")
    children = relationship("Subject", back_populates="parent", cascade="all, delete-orphan")
    chapters = relationship("Chapter", back_populates="subject", cascade="all, delete-orphan")
    class_mappings = relationship("SubjectClassMapping", back_populates="subject", cascade="all, delete-orphan")


class ClassLevel(Base):
    __tablename__ = "class_levels"

    id = Column(String(36), primary_key=True, default=new_id)
    name_en = Column(String(100), nullable=False)
    name_mr = Column(String(100), nullable=False)
    slug = Column(String(50), unique=True, index=True, nullable=False)
    description_en = Column(Text)
    description_mr = Column(Text)
    order_index = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    subject_mappings = relationship("SubjectClassMapping", back_populates="class_level", cascade="all, delete-orphan")


class SubjectClassMapping(Base):
    __tablename__ = "subject_class_mappings"
    __table_args__ = (UniqueConstraint("subject_id", "class_level_id", name="uq_subject_class"),)

    id = Column(String(36), primary_key=True, default=new_id)
    subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    class_level_id = Column(String(36), ForeignKey("class_levels.id", ondelete="CASCADE"), nullable=False, index=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    subject = relationship("Subject", back_populates="class_mappings")
    class_level = relationship("ClassLevel", back_populates="subject_mappings")


class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(String(36), primary_key=True, default=new_id)
    subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    name_en = Column(String(300), nullable=False)
    name_mr = Column(String(300), nullable=False)
    description_en = Column(Text)
    description_mr = Column(Text)
    order_index = Column(Integer, default=1)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    subject = relationship("Subject", back_populates="chapters")
    questions = relationship("Question", back_populates="chapter")


class Question(Base):
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, default=new_id)
    subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    chapter_id = Column(String(36), ForeignKey("chapters.id", ondelete="SET NULL"), index=True)
    question_text = Column(Text, nullable=False)
    question_language = Column(String(2), nullable=False, default="en")
    question_type = Column(String(20), nullable=False, index=True)
    difficulty = Column(String(10), nullable=False, default="medium")
    answer_data = Column(JSON, nullable=False)     # shape depends on question_type
    explanation = Column(Text)
    tags = Column(JSON, default=list)
    class_level = Column(String(20))
    marks = Column(Integer, default=1)
    is_active = Column(Boolean, default=True)
    created_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    chapter = relationship("Chapter", back_populates="questions")
    subject = relationship("Subject")


class ExamStructure(Base):
    __tablename__ = "exam_structures"

    id = Column(String(36), primary_key=True, default=new_id)
    subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), index=True)
    class_level_id = Column(String(36), ForeignKey("class_levels.id", ondelete="SET NULL"), index=True)
    name_en = Column(String(300), nullable=False)
    name_mr = Column(String(300), nullable=False)
    description_en = Column(Text)
    description_mr = Column(Text)
    class_level = Column(String(20))
    duration_minutes = Column(Integer, nullable=False, default=60)
    total_questions = Column(Integer, nullable=False, default=50)
    total_marks = Column(Integer, nullable=False, default=100)
    passing_percentage = Column(Integer, nullable=False, default=35)
    sections = Column(JSON, default=list)          # [{id, code, name_en, question_type, ...}]
    is_template = Column(Boolean, default=False)
    order_index = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    subject = relationship("Subject")
    class_level_ref = relationship("ClassLevel")


class ScheduledExam(Base):
    __tablename__ = "scheduled_exams"

    id = Column(String(36), primary_key=True, default=new_id)
    class_level_id = Column(String(36), ForeignKey("class_levels.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id = Column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    exam_structure_id = Column(String(36), ForeignKey("exam_structures.id", ondelete="SET NULL"), index=True)
    name_en = Column(String(300), nullable=False)
    name_mr = Column(String(300), nullable=False)
    description_en = Column(Text)
    description_mr = Column(Text)
    total_marks = Column(Integer, nullable=False, default=100)
    duration_minutes = Column(Integer, nullable=False, default=60)
    scheduled_date = Column(String(10))  # YYYY-MM-DD
    scheduled_time = Column(String(8))   # HH:MM:SS
    status = Column(String(20), nullable=False, default="draft")
    order_index = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    publish_results = Column(Boolean, default=False)
    max_attempts = Column(Integer, default=0)  # 0 = unlimited
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    class_level = relationship("ClassLevel")
    subject = relationship("Subject")
    exam_structure = relationship("ExamStructure")


class Exam(Base):
    __tablename__ = "exams"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), index=True)
    subject_id = Column(String(36), ForeignKey("subjects.id"), index=True)
    exam_structure_id = Column(String(36), ForeignKey("exam_structures.id"))
    scheduled_exam_id = Column(String(36), ForeignKey("scheduled_exams.id"), index=True)
    status = Column(String(20), nullable=False, default="in_progress")
    score = Column(Integer)
    total_marks = Column(Integer)
    percentage = Column(Float)
    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    answers = relationship("ExamAnswer", back_populates="exam", cascade="all, delete-orphan")
    user = relationship("Profile")
    subject = relationship("Subject")
    scheduled_exam = relationship("ScheduledExam")
    exam_structure = relationship("ExamStructure")


class ExamAnswer(Base):
    __tablename__ = "exam_answers"

    id = Column(String(36), primary_key=True, default=new_id)
    exam_id = Column(String(36), ForeignKey("exams.id", ondelete="CASCADE"), index=True)
    question_id = Column(String(36), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    user_answer = Column(JSON)
    is_correct = Column(Boolean)   # None until graded, stays None for manual types
    marks_obtained = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    exam = relationship("Exam", back_populates="answers")
    question = relationship("Question")


class QuestionImportBatch(Base):
    __tablename__ = "question_import_batches"

    id = Column(String(36), primary_key=True, default=new_id)
    subject_slug = Column(String(100), nullable=False)
    batch_name = Column(String(300))
    status = Column(String(20), nullable=False, default="pending")
    parsed_questions = Column(JSON, nullable=False, default=list)
    meta = Column("metadata", JSON)
    created_by = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    imported_at = Column(DateTime)
