# sheet_import.py
"""
Reads a question bank spreadsheet (CSV or .xlsx) into the same parsed-question
dicts the PDF import produces, so both kinds of batch go through the same
review and commit steps.
"""
import io
import re
import zipfile
from typing import Dict, List, Optional

import pandas as pd

from models import DIFFICULTIES
from utils import normalize_question_type

CSV_TYPES = {"text/csv", "application/csv", "application/vnd.ms-excel"}
XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# header (lower-cased) -> field; first non-empty column wins
COLUMNS = {
    "text_mr": ("question (marathi)", "question_mr", "questiontextmr", "question marathi"),
    "text_en": ("question (english)", "question_en", "questiontexten", "question english"),
    "option_a": ("option a (marathi)", "option a", "option_a", "optiona", "a"),
    "option_b": ("option b (marathi)", "option b", "option_b", "optionb", "b"),
    "option_c": ("option c (marathi)", "option c", "option_c", "optionc", "c"),
    "option_d": ("option d (marathi)", "option d", "option_d", "optiond", "d"),
    "correct": ("correct answer", "correct_answer", "correctanswer", "correct"),
    "difficulty": ("difficulty",),
    "marks": ("marks",),
    "type": ("type", "question_type", "questiontype"),
    "explanation": ("explanation", "explanation_en"),
}

OPTION_LETTER = re.compile(r"^[A-D]$", re.I)
OPTION_INDEX = re.compile(r"^[0-3]$")


class SheetImportError(Exception):
    pass


def is_csv(filename: Optional[str], content_type: Optional[str]) -> bool:
    name = (filename or "").lower()
    if name.endswith(".csv"):
        return True
    if name.endswith((".xlsx", ".xls")):
        return False
    return content_type in CSV_TYPES


def read_rows(data: bytes, filename: Optional[str], content_type: Optional[str]) -> List[Dict[str, str]]:
    """Rows of the first sheet as {lower-cased header: stripped cell text}."""
    if not data:
        raise SheetImportError("Uploaded file is empty")
    if (filename or "").lower().endswith(".xls"):
        raise SheetImportError("Legacy .xls files are not supported, save the sheet as .xlsx or .csv")

    buffer = io.BytesIO(data)
    try:
        if is_csv(filename, content_type):
            frame = pd.read_csv(buffer, dtype=str, keep_default_na=False)
        else:
            frame = pd.read_excel(buffer, dtype=str, engine="openpyxl")
    except (ValueError, zipfile.BadZipFile) as e:
        raise SheetImportError(f"Failed to parse file. Please check the format. ({e})")

    frame = frame.fillna("")
    frame.columns = [str(c).strip().lower() for c in frame.columns]
    return [
        {header: str(value).strip() for header, value in row.items()}
        for row in frame.to_dict(orient="records")
    ]


def _value(row: Dict[str, str], field: str) -> str:
    for header in COLUMNS[field]:
        if row.get(header):
            return row[header]
    return ""


def parse_correct_answer(value: str) -> Optional[int]:
    """Index ("2") or letter ("C") to a 0-based option index."""
    value = value.strip()
    if OPTION_INDEX.match(value):
        return int(value)
    if OPTION_LETTER.match(value):
        return ord(value.upper()) - ord("A")
    return None


def rows_to_questions(rows: List[Dict[str, str]]) -> List[dict]:
    questions = []
    for index, row in enumerate(rows, start=1):
        text_mr = _value(row, "text_mr")
        text_en = _value(row, "text_en")
        if not text_mr and not text_en:
            continue

        options = [_value(row, f"option_{letter}") for letter in "abcd"]
        found = [o for o in options if o]
        question_type = normalize_question_type(_value(row, "type")) or "mcq_single"
        difficulty = _value(row, "difficulty").lower()
        try:
            marks = int(float(_value(row, "marks") or 1))
        except ValueError:
            marks = 1

        errors = []
        if question_type.startswith("mcq") and len(found) < 4:
            errors.append(f"Expected 4 options, found {len(found)}")

        questions.append({
            "question_number": index,
            "question_text_mr": text_mr or None,
            "question_text_en": text_en or None,
            "options": found + [""] * (4 - len(found)) if found else [],
            "correct_answer": parse_correct_answer(_value(row, "correct")),
            "question_type": question_type,
            "marks": marks if marks > 0 else 1,
            "difficulty": difficulty if difficulty in DIFFICULTIES else "medium",
            "explanation": _value(row, "explanation") or None,
            "parsing_errors": errors,
        })
    return questions
