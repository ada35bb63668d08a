# section_editor.py
"""
Draft state for editing one section of an exam structure.

Editing happens in three steps: configure (name, type, counts, marks),
source (which chapters or questions feed the section) and review.
"""
from typing import List, Optional, Tuple

from models import QUESTION_TYPES

CONFIGURE, SOURCE, REVIEW = 1, 2, 3
STEPS = (
    (CONFIGURE, "Configure"),
    (SOURCE, "Source"),
    (REVIEW, "Review"),
)


class SectionValidationError(Exception):
    pass


def _whole_number(section: dict, key: str, label: str) -> int:
    """1 when the key is missing or null; 0 and negatives are kept for to_section to reject."""
    value = section.get(key)
    if value is None or value == "":
        return 1
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise SectionValidationError(f"{label} must be a whole number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise SectionValidationError(f"{label} must be a whole number")


class SectionDraft:
    def __init__(self, section: Optional[dict] = None, order_index: int = 1):
        section = section or {}
        self.original = dict(section)
        self.name_en = section.get("name_en") or ""
        self.name_mr = section.get("name_mr") or ""
        self.question_type = section.get("question_type") or "mcq_single"
        self.question_count = _whole_number(section, "question_count", "Question count")
        self.marks_per_question = _whole_number(section, "marks_per_question", "Marks per question")
        self.instructions_en = section.get("instructions_en") or ""
        self.instructions_mr = section.get("instructions_mr") or ""
        self.chapter_configs = list(section.get("chapter_configs") or [])
        self.selected_question_ids = list(section.get("selected_question_ids") or [])
        self.order_index = section.get("order_index") or order_index
        self.step = CONFIGURE

    # --- navigation ----------------------------------------------------------
    def next_step(self) -> int:
        if self.step < REVIEW:
            self.step += 1
        return self.step

    def prev_step(self) -> int:
        if self.step > CONFIGURE:
            self.step -= 1
        return self.step

    def go_to(self, step: int) -> int:
        if step not in (CONFIGURE, SOURCE, REVIEW):
            raise ValueError(f"Unknown step {step}")
        self.step = step
        return self.step

    # --- status --------------------------------------------------------------
    @property
    def total_marks(self) -> int:
        return self.question_count * self.marks_per_question

    def is_step_complete(self, step: int) -> bool:
        if step == CONFIGURE:
            return bool(self.name_en.strip())
        if step == SOURCE:
            return bool(self.chapter_configs) or bool(self.selected_question_ids)
        return True

    def step_status(self) -> List[dict]:
        return [
            {"id": step, "label": label, "complete": self.is_step_complete(step), "current": step == self.step}
            for step, label in STEPS
        ]

    def update(self, **changes) -> None:
        for key, value in changes.items():
            if value is None or not hasattr(self, key) or key in {"step", "original"}:
                continue
            setattr(self, key, value)

    # --- output --------------------------------------------------------------
    def to_section(self) -> dict:
        if not self.name_en.strip():
            raise SectionValidationError("Please enter a section name")
        if self.question_type not in QUESTION_TYPES:
            raise SectionValidationError(f"Unknown question type: {self.question_type}")
        if self.question_count < 1:
            raise SectionValidationError("Question count must be at least 1")
        if self.marks_per_question < 1:
            raise SectionValidationError("Marks per question must be at least 1")

        section = dict(self.original)
        section.update({
            "name_en": self.name_en.strip(),
            "name_mr": self.name_mr.strip(),
            "question_type": self.question_type,
            "question_count": self.question_count,
            "marks_per_question": self.marks_per_question,
            "total_marks": self.total_marks,
            "instructions_en": self.instructions_en,
            "instructions_mr": self.instructions_mr,
            "order_index": self.order_index,
        })
        section.setdefault("id", f"s{self.order_index}")
        section.setdefault("code", section["id"])

        for key, value in (("chapter_configs", self.chapter_configs),
                           ("selected_question_ids", self.selected_question_ids)):
            if value:
                section[key] = value
            else:
                section.pop(key, None)
        return section


def section_totals(sections: List[dict]) -> Tuple[int, int]:
    total_questions = sum(int(s.get("question_count") or 0) for s in sections)
    total_marks = sum(
        int(s.get("total_marks") or (s.get("question_count") or 0) * (s.get("marks_per_question") or 0))
        for s in sections
    )
    return total_questions, total_marks


def apply_section(sections: List[dict], index: int, section: dict) -> Tuple[List[dict], int, int]:
    """Put `section` at `index` (or append at the end) and recompute the structure totals."""
    updated = list(sections or [])
    if index < 0 or index > len(updated):
        raise IndexError(f"Section index {index} is out of range")
    if index == len(updated):
        updated.append(section)
    else:
        updated[index] = section
    total_questions, total_marks = section_totals(updated)
    return updated, total_questions, total_marks
