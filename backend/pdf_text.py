# pdf_text.py
import io
import re
from typing import Dict, List, Optional

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

QUESTION_RE = re.compile(r"^(\d+)\.\s*(.+)$")
OPTION_RE = re.compile(r"^([A-D])\.\s*(.+)$")
ANSWER_KEY_PATTERNS = (
    re.compile(r"(\d+)[.)]\s*([A-D])\b", re.I),
    re.compile(r"Q(\d+)[:\s]+([A-D])\b", re.I),
)

# Limit size for LLM cost
MAX_CHARS = 60000


class PdfExtractionError(Exception):
    pass


def extract_pdf_text(data: bytes) -> str:
    """
    Returns the text of every page joined by newlines.
    """
    if not data:
        raise PdfExtractionError("Uploaded PDF is empty")
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError, KeyError) as e:
        raise PdfExtractionError(f"Failed to extract text from PDF: {e}")

    text = "\n".join(pages).strip()
    if not text:
        raise PdfExtractionError("PDF has no extractable text (scanned PDFs are not supported)")
    return text


def _finish(number: int, text: str, options: Dict[int, str]) -> dict:
    ordered = [options.get(i, "") for i in range(4)]
    errors = []
    if len(options) != 4:
        errors.append(f"Expected 4 options, found {len(options)}")
    return {
        "question_number": number,
        "question_text_mr": text.strip(),
        "question_text_en": None,
        "options": ordered,
        "correct_answer": None,
        "question_type": "mcq_single",
        "marks": 1,
        "difficulty": "medium",
        "explanation": None,
        "parsing_errors": errors,
    }


def parse_questions_from_text(text: str) -> List[dict]:
    """
    Line-based parser for papers laid out as

        1. question text
        A. option
        B. option ...
    """
    questions = []
    number: Optional[int] = None
    body = ""
    options: Dict[int, str] = {}

    for line in (l.strip() for l in text.splitlines()):
        if not line:
            continue
        match = QUESTION_RE.match(line)
        if match:
            if number is not None and body:
                questions.append(_finish(number, body, options))
            number, body, options = int(match.group(1)), match.group(2), {}
            continue
        match = OPTION_RE.match(line)
        if match and number is not None:
            options[ord(match.group(1)) - ord("A")] = match.group(2).strip()
            continue
        # continuation of the question text
        if number is not None and not options:
            body += " " + line

    if number is not None and body:
        questions.append(_finish(number, body, options))
    return questions


def parse_answer_key(text: str) -> Dict[int, int]:
    """{question number: option index} from lines like "1. A", "2) C" or "Q3: B"."""
    key: Dict[int, int] = {}
    for pattern in ANSWER_KEY_PATTERNS:
        for num, letter in pattern.findall(text or ""):
            key[int(num)] = ord(letter.upper()) - ord("A")
    return key


def apply_answer_key(questions: List[dict], answer_key: Dict[int, int]) -> List[dict]:
    out = []
    for q in questions:
        number = q.get("question_number")
        if number in answer_key:
            q = {**q, "correct_answer": answer_key[number]}
        out.append(q)
    return out
