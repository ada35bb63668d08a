# utils.py
import re
from typing import Any, Optional

from bs4 import BeautifulSoup, Comment

from models import DIFFICULTIES, QUESTION_TYPES

ALLOWED_TAGS = {
    "p", "br", "strong", "em", "u", "s", "code", "pre",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "blockquote", "a", "img",
    "table", "thead", "tbody", "tr", "th", "td",
    "span", "div", "sub", "sup", "mark",
}
ALLOWED_ATTRS = {
    "href", "target", "rel", "src", "alt", "width", "height",
    "style", "class", "data-type", "data-formula", "data-display", "align",
}
# dropped together with everything inside them
STRIP_WITH_CONTENT = {"script", "style", "iframe", "object", "embed"}
SAFE_URL = re.compile(r"^(?:(?:https?|mailto|tel):|[^a-z]|[a-z+.-]+(?:[^a-z+.\-:]|$))", re.I)
# removed before the scheme check ("java\tscript:" is still javascript:)
URL_IGNORED_CHARS = re.compile(r"[\x00-\x20\xa0\u1680\u180e\u2000-\u2029\u205f\u3000]")
DATA_IMAGE_URL = re.compile(r"^data:image/", re.I)

SEARCH_WILDCARDS = re.compile(r"[%_\\]")
SEARCH_INJECTION = re.compile(r"[<>\"'`;(){}\[\]]")

# older exports use these names for the question types
TYPE_ALIASES = {
    "mcq_double": "mcq_two",
    "mcq_triple": "mcq_three",
    "tf": "true_false",
    "fib": "fill_blank",
    "sa_brief": "short_answer",
    "html_code": "programming",
}


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")


def alternate_slug(slug: str) -> str:
    """scholarship-marathi <-> scholarship_marathi"""
    if "-" in slug:
        return slug.replace("-", "_")
    return slug.replace("_", "-")


def sanitize_search_query(query: Optional[str]) -> str:
    if not query:
        return ""
    cleaned = SEARCH_WILDCARDS.sub("", query)
    cleaned = SEARCH_INJECTION.sub("", cleaned)
    return cleaned.strip()[:100]


def normalize_question_type(value: Optional[str]) -> Optional[str]:
    """Known type (or alias) -> canonical type, anything else -> None."""
    key = (value or "").strip().lower()
    key = TYPE_ALIASES.get(key, key)
    return key if key in QUESTION_TYPES else None


def normalize_school_name(name: str) -> str:
    return " ".join((name or "").split()).lower()


def is_safe_url(tag_name: str, attr: str, value: str) -> bool:
    """data: URLs are only kept as image sources."""
    compact = URL_IGNORED_CHARS.sub("", value)
    if DATA_IMAGE_URL.match(compact):
        return tag_name == "img" and attr == "src"
    return bool(SAFE_URL.match(compact))


def sanitize_html(html: Optional[str]) -> Optional[str]:
    """Keeps the allow-listed tags/attributes, unwraps the rest."""
    if not html:
        return html
    soup = BeautifulSoup(html, "html.parser")

    for node in soup.find_all(string=lambda s: isinstance(s, Comment)):
        node.extract()
    for tag in soup.find_all(list(STRIP_WITH_CONTENT)):
        tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        for attr in list(tag.attrs):
            value = tag.attrs[attr]
            if attr not in ALLOWED_ATTRS:
                del tag.attrs[attr]
            elif attr in {"href", "src"} and not is_safe_url(tag.name, attr, str(value)):
                del tag.attrs[attr]
            elif attr == "style" and "expression(" in str(value).lower():
                del tag.attrs[attr]
    return str(soup)


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def snake_keys(value: Any) -> Any:
    """Recursively converts camelCase dict keys to snake_case."""
    if isinstance(value, dict):
        return {to_snake(k) if isinstance(k, str) else k: snake_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [snake_keys(v) for v in value]
    return value


def _correct_answer(q: dict):
    answers = q.get("correct_answers")
    if isinstance(answers, list) and answers:
        ints = [a for a in answers if isinstance(a, int) and not isinstance(a, bool)]
        if q.get("type") == "mcq_single" or q.get("question_type") == "mcq_single":
            return ints[0] if ints else None
        return ints or None
    single = q.get("correct_answer")
    if isinstance(single, bool):
        return None
    if isinstance(single, (int, list)):
        return single
    return None


def normalize_extracted_questions(raw: dict) -> list:
    """
    Shapes the model's JSON ({"questions": [...], "metadata": {...}}) into
    the parsed-question dicts kept on an import batch. Questions with no text
    in either language are dropped.
    """
    parsed = []
    for index, q in enumerate(raw.get("questions") or [], start=1):
        q = snake_keys(q) if isinstance(q, dict) else {}
        text_mr = (q.get("text_mr") or q.get("question_text_mr") or "").strip()
        text_en = (q.get("text_en") or q.get("question_text_en") or "").strip()
        if not text_mr and not text_en:
            continue

        question_type = q.get("type") or q.get("question_type") or "mcq_single"
        if question_type not in QUESTION_TYPES:
            question_type = "mcq_single"
        difficulty = (q.get("difficulty") or "").lower()
        number = q.get("number") or q.get("question_number")

        parsed.append({
            "question_number": number if isinstance(number, int) else index,
            "question_text_mr": text_mr or None,
            "question_text_en": text_en or None,
            "options": [str(o).strip() for o in (q.get("options") or [])],
            "correct_answer": _correct_answer(q),
            "question_type": question_type,
            "marks": q.get("marks") or 2,
            "difficulty": difficulty if difficulty in DIFFICULTIES else "medium",
            "explanation": q.get("explanation_en") or q.get("explanation_mr") or q.get("explanation"),
        })
    return parsed
