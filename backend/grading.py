# grading.py
"""
Answer checking for exam attempts.

answer_data shapes per question type:
    mcq_single            {"options": [...], "correct": 0}
    mcq_two / mcq_three   {"options": [...], "correct": [0, 2]}
    true_false            {"correct": true}
    fill_blank            {"blanks": ["x", ["y", "why"]]}
    match                 {"pairs": [{"left": "A", "right": "1"}, ...]}
short_answer, long_answer and programming are graded by hand.
"""
import json
from typing import Any, Iterable, Optional

OPTION_LABELS = ("A", "B", "C", "D", "E", "F")
MANUAL_TYPES = {"short_answer", "long_answer", "programming"}


def to_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def to_boolean(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes"}:
            return True
        if lowered in {"false", "0", "no"}:
            return False
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
    return None


def _normalize(value: Any) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split()).lower()


def option_index(value: Any) -> Optional[int]:
    """Index from either a number ("2", 2) or an option label ("C")."""
    number = to_number(value)
    if number is not None:
        return number
    if isinstance(value, str) and value.strip().upper() in OPTION_LABELS:
        return OPTION_LABELS.index(value.strip().upper())
    return None


def parse_answer_data(answer_data: Any) -> Optional[dict]:
    if not answer_data:
        return None
    if isinstance(answer_data, dict):
        return answer_data
    if isinstance(answer_data, str):
        try:
            parsed = json.loads(answer_data)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


def _check_mcq_single(user_answer, correct) -> bool:
    picked, expected = option_index(user_answer), to_number(correct)
    return picked is not None and expected is not None and picked == expected


def _check_mcq_multiple(user_answer, correct) -> bool:
    if not isinstance(user_answer, list) or not isinstance(correct, list):
        return False
    picked = sorted(i for i in (option_index(v) for v in user_answer) if i is not None)
    expected = sorted(i for i in (to_number(v) for v in correct) if i is not None)
    return picked == expected


def _check_true_false(user_answer, correct) -> bool:
    picked, expected = to_boolean(user_answer), to_boolean(correct)
    return picked is not None and expected is not None and picked == expected


def _acceptable(blank) -> list:
    return blank if isinstance(blank, list) else [blank]


def _check_fill_blank(user_answer, blanks) -> bool:
    if not isinstance(blanks, list) or not blanks:
        return False
    if isinstance(user_answer, str):
        given = _normalize(user_answer)
        return any(given == _normalize(b) for blank in blanks for b in _acceptable(blank))
    if isinstance(user_answer, list):
        if len(user_answer) != len(blanks):
            return False
        return all(
            _normalize(given) in {_normalize(b) for b in _acceptable(blank)}
            for given, blank in zip(user_answer, blanks)
        )
    return False


def _check_match(user_answer, pairs) -> bool:
    if not isinstance(user_answer, dict) or not isinstance(pairs, list) or not pairs:
        return False
    for pair in pairs:
        chosen = user_answer.get(pair.get("left"))
        if chosen is None and pair.get("left_en"):
            chosen = user_answer.get(pair["left_en"])
        if chosen is None or chosen not in (pair.get("right"), pair.get("right_en")):
            return False
    return True


def requires_manual_grading(question_type: str) -> bool:
    return question_type in MANUAL_TYPES


def check_answer(question_type: str, answer_data: Any, user_answer: Any) -> Optional[bool]:
    """
    True/False for auto-gradable types, None for types a teacher grades by hand.
    Unknown question types are never correct.
    """
    if requires_manual_grading(question_type):
        return None
    data = parse_answer_data(answer_data)
    if data is None or user_answer is None or user_answer == "":
        return False

    if question_type == "mcq_single":
        return _check_mcq_single(user_answer, data.get("correct"))
    if question_type in {"mcq_two", "mcq_three"}:
        return _check_mcq_multiple(user_answer, data.get("correct"))
    if question_type == "true_false":
        return _check_true_false(user_answer, data.get("correct"))
    if question_type == "fill_blank":
        return _check_fill_blank(user_answer, data.get("blanks"))
    if question_type == "match":
        return _check_match(user_answer, data.get("pairs") or [])
    return False


def _answered(value: Any) -> bool:
    return value is not None and value != "" and value != [] and value != {}


def exam_stats(answers: Iterable[dict], total_marks: int, passing_percentage: int = 35) -> dict:
    """
    answers: dicts with user_answer, is_correct and marks_obtained.
    """
    answers = list(answers)
    attempted = correct = wrong = obtained = 0
    for answer in answers:
        if _answered(answer.get("user_answer")):
            attempted += 1
        if answer.get("is_correct") is True:
            correct += 1
        elif answer.get("is_correct") is False:
            wrong += 1
        obtained += answer.get("marks_obtained") or 0

    percentage = round(obtained / total_marks * 100) if total_marks > 0 else 0
    return {
        "total_questions": len(answers),
        "attempted_questions": attempted,
        "correct_answers": correct,
        "wrong_answers": wrong,
        "unanswered": len(answers) - attempted,
        "total_marks": total_marks,
        "obtained_marks": obtained,
        "percentage": percentage,
        "is_passing": percentage >= passing_percentage,
    }
