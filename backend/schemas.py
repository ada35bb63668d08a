# schemas.py
from typing import Any, ClassVar, Dict, List, Optional, Literal, Tuple
from pydantic import BaseModel, Field, model_validator

from utils import to_camel

QuestionType = Literal[
    "fill_blank", "true_false", "mcq_single", "mcq_two", "mcq_three",
    "match", "short_answer", "long_answer", "programming",
]
Difficulty = Literal["easy", "medium", "hard"]
Language = Literal["en", "mr"]
ScheduledStatus = Literal["draft", "scheduled", "active", "completed", "archived", "cancelled"]
Role = Literal["student", "teacher", "admin", "super_admin"]

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}(:\d{2})?$"


class ApiModel(BaseModel):
    """Accepts both snake_case and camelCase keys."""
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UpdateModel(ApiModel):
    """
    PATCH body. Every field may be left out, but the ones named in
    `not_null` back NOT NULL columns and cannot be sent as null.
    """
    not_null: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_nulls(self):
        nulls = [name for name in self.not_null if name in self.model_fields_set and getattr(self, name) is None]
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self


# --- subjects ---------------------------------------------------------------
class SubjectIn(ApiModel):
    name_en: str = Field(min_length=1, max_length=200)
    name_mr: str = Field(min_length=1, max_length=200)
    slug: Optional[str] = Field(None, max_length=100)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    icon: Optional[str] = None
    order_index: int = 0
    is_active: bool = True
    is_category: bool = False
    is_paper: bool = False
    paper_number: Optional[str] = None
    parent_subject_id: Optional[str] = None


class SubjectUpdate(UpdateModel):
    not_null = ("name_en", "name_mr", "slug", "order_index", "is_active", "is_category", "is_paper")

    name_en: Optional[str] = Field(None, min_length=1, max_length=200)
    name_mr: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=100)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    icon: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None
    is_category: Optional[bool] = None
    is_paper: Optional[bool] = None
    paper_number: Optional[str] = None


class ChildSubjectIn(ApiModel):
    name_en: str = Field(min_length=1, max_length=200)
    name_mr: str = Field(min_length=1, max_length=200)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    icon: Optional[str] = None
    order_index: Optional[int] = None
    is_paper: bool = False
    paper_number: Optional[str] = None


# --- chapters ---------------------------------------------------------------
class ChapterIn(ApiModel):
    name_en: str = Field(min_length=1, max_length=300)
    name_mr: str = Field(min_length=1, max_length=300)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    order_index: Optional[int] = None


class ChapterUpdate(UpdateModel):
    not_null = ("name_en", "name_mr", "order_index", "is_active")

    name_en: Optional[str] = Field(None, min_length=1, max_length=300)
    name_mr: Optional[str] = Field(None, min_length=1, max_length=300)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None


class DistributeIn(ApiModel):
    question_type: QuestionType
    required_count: int = Field(ge=0)
    chapter_ids: Optional[List[str]] = None


# --- questions --------------------------------------------------------------
class QuestionIn(ApiModel):
    question_text: str = Field(min_length=1)
    question_language: Language = "en"
    question_type: QuestionType
    difficulty: Difficulty = "medium"
    answer_data: Dict[str, Any]
    explanation: Optional[str] = None
    tags: List[str] = []
    class_level: Optional[str] = None
    marks: int = Field(1, ge=1)
    chapter_id: Optional[str] = None
    created_by: Optional[str] = None


class QuestionUpdate(UpdateModel):
    not_null = (
        "question_text", "question_language", "question_type", "difficulty",
        "answer_data", "tags", "marks", "is_active",
    )

    question_text: Optional[str] = Field(None, min_length=1)
    question_language: Optional[Language] = None
    question_type: Optional[QuestionType] = None
    difficulty: Optional[Difficulty] = None
    answer_data: Optional[Dict[str, Any]] = None
    explanation: Optional[str] = None
    tags: Optional[List[str]] = None
    class_level: Optional[str] = None
    marks: Optional[int] = Field(None, ge=1)
    chapter_id: Optional[str] = None
    is_active: Optional[bool] = None


class ByIdsIn(ApiModel):
    ids: List[str] = Field(max_length=500)


# --- question import --------------------------------------------------------
class ReviewIn(ApiModel):
    batch_id: str
    questions: List[Dict[str, Any]]
    batch_name: Optional[str] = None


class CommitIn(ApiModel):
    batch_id: str
    default_chapter_id: Optional[str] = None
    default_class_level: Optional[str] = None
    default_difficulty: Optional[Difficulty] = None
    default_marks: Optional[int] = Field(None, ge=1)


# --- class levels -----------------------------------------------------------
class ClassLevelIn(ApiModel):
    name_en: str = Field(min_length=1, max_length=100)
    name_mr: str = Field(min_length=1, max_length=100)
    slug: str = Field(min_length=1, max_length=50)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    order_index: int = 0
    is_active: bool = True


class ClassLevelUpdate(UpdateModel):
    not_null = ("name_en", "name_mr", "slug", "order_index", "is_active")

    name_en: Optional[str] = Field(None, min_length=1, max_length=100)
    name_mr: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=50)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None


class ClassSubjectIn(ApiModel):
    subject_id: str


# --- exam structures --------------------------------------------------------
class ExamStructureIn(ApiModel):
    subject_id: str
    class_level_id: Optional[str] = None
    name_en: str = Field(min_length=1, max_length=300)
    name_mr: str = Field(min_length=1, max_length=300)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    class_level: Optional[str] = None
    duration_minutes: int = 60
    total_questions: int = 50
    total_marks: int = 100
    passing_percentage: int = 35
    sections: List[Dict[str, Any]] = []
    is_template: bool = False
    order_index: int = 0
    is_active: bool = True


class ExamStructureUpdate(UpdateModel):
    not_null = (
        "subject_id", "name_en", "name_mr", "duration_minutes", "total_questions", "total_marks",
        "passing_percentage", "sections", "is_template", "order_index", "is_active",
    )

    subject_id: Optional[str] = None
    class_level_id: Optional[str] = None
    name_en: Optional[str] = Field(None, min_length=1, max_length=300)
    name_mr: Optional[str] = Field(None, min_length=1, max_length=300)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    class_level: Optional[str] = None
    duration_minutes: Optional[int] = None
    total_questions: Optional[int] = None
    total_marks: Optional[int] = None
    passing_percentage: Optional[int] = None
    sections: Optional[List[Dict[str, Any]]] = None
    is_template: Optional[bool] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None


class ChapterConfig(ApiModel):
    chapter_id: str
    question_count: int = Field(ge=1)


class SectionIn(ApiModel):
    name_en: Optional[str] = None
    name_mr: Optional[str] = None
    question_type: Optional[QuestionType] = None
    question_count: Optional[int] = None
    marks_per_question: Optional[int] = None
    instructions_en: Optional[str] = None
    instructions_mr: Optional[str] = None
    chapter_configs: Optional[List[ChapterConfig]] = None
    selected_question_ids: Optional[List[str]] = None


# --- scheduled exams --------------------------------------------------------
class ScheduledExamIn(ApiModel):
    class_level_id: str
    subject_id: str
    exam_structure_id: Optional[str] = None
    name_en: str = Field(min_length=1, max_length=300)
    name_mr: str = Field(min_length=1, max_length=300)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    total_marks: Optional[int] = Field(None, ge=1)
    duration_minutes: Optional[int] = Field(None, ge=1)
    scheduled_date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    scheduled_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: ScheduledStatus = "draft"
    order_index: Optional[int] = None
    is_active: bool = True
    publish_results: bool = False
    max_attempts: int = Field(0, ge=0)


class ScheduledExamUpdate(UpdateModel):
    not_null = (
        "name_en", "name_mr", "total_marks", "duration_minutes", "status",
        "order_index", "is_active", "publish_results", "max_attempts",
    )

    exam_structure_id: Optional[str] = None
    name_en: Optional[str] = Field(None, min_length=1, max_length=300)
    name_mr: Optional[str] = Field(None, min_length=1, max_length=300)
    description_en: Optional[str] = None
    description_mr: Optional[str] = None
    total_marks: Optional[int] = Field(None, ge=1)
    duration_minutes: Optional[int] = Field(None, ge=1)
    scheduled_date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    scheduled_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: Optional[ScheduledStatus] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None
    publish_results: Optional[bool] = None
    max_attempts: Optional[int] = Field(None, ge=0)


# --- exam attempts ----------------------------------------------------------
class ExamStartIn(ApiModel):
    user_id: str
    scheduled_exam_id: Optional[str] = None
    exam_structure_id: Optional[str] = None
    subject_id: Optional[str] = None


class AnswerIn(ApiModel):
    question_id: str
    user_answer: Any = None


class AnswersIn(ApiModel):
    answers: List[AnswerIn]


# --- schools ----------------------------------------------------------------
class SchoolIn(ApiModel):
    name: str = Field(min_length=2, max_length=300)
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: str = "India"
    address: Optional[str] = None
    type: Optional[str] = None
    level: Optional[str] = None
    founded_year: Optional[str] = Field(None, pattern=r"^\d{4}$")
    is_verified: bool = False
    is_user_added: bool = False
    created_by: Optional[str] = None


class SchoolUpdate(UpdateModel):
    not_null = ("name", "is_verified")

    name: Optional[str] = Field(None, min_length=2, max_length=300)
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None
    address: Optional[str] = None
    type: Optional[str] = None
    level: Optional[str] = None
    founded_year: Optional[str] = Field(None, pattern=r"^\d{4}$")
    is_verified: Optional[bool] = None


# --- users ------------------------------------------------------------------
class UserIn(ApiModel):
    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: Optional[str] = Field(None, max_length=20)
    name: Optional[str] = Field(None, max_length=200)
    avatar_url: Optional[str] = None
    school_id: Optional[str] = None
    class_level: Optional[str] = None
    role: Role = "student"
    permissions: Dict[str, Any] = {}
    preferred_language: Language = "en"
    is_active: bool = True


class UserUpdate(UpdateModel):
    not_null = ("role", "permissions", "preferred_language", "is_active")

    email: Optional[str] = Field(None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: Optional[str] = Field(None, max_length=20)
    name: Optional[str] = Field(None, max_length=200)
    avatar_url: Optional[str] = None
    school_id: Optional[str] = None
    class_level: Optional[str] = None
    role: Optional[Role] = None
    permissions: Optional[Dict[str, Any]] = None
    preferred_language: Optional[Language] = None
    is_active: Optional[bool] = None
