# routers/imports.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from db import get_session
import models
import crud
import llm
from llm import LLMError
from pdf_text import (
    PdfExtractionError, extract_pdf_text, parse_questions_from_text, parse_answer_key, apply_answer_key,
)
from schemas import ReviewIn, CommitIn
from sheet_import import CSV_TYPES, XLSX_TYPE, SheetImportError, is_csv, read_rows, rows_to_questions
from serializers import import_batch_out
from utils import normalize_extracted_questions, sanitize_html

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions/import", tags=["question-import"])

MULTI_ANSWER_TYPES = {"mcq_two", "mcq_three"}
SHEET_TYPES = CSV_TYPES | {XLSX_TYPE}


def _batch_or_404(db, batch_id: str) -> models.QuestionImportBatch:
    batch = db.query(models.QuestionImportBatch).filter(models.QuestionImportBatch.id == batch_id).first()
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return batch


def _read_pdf(upload: UploadFile, label: str) -> str:
    if upload.content_type != "application/pdf":
        raise HTTPException(status_code=400, detail=f"{label} must be a PDF")
    try:
        return extract_pdf_text(upload.file.read())
    except PdfExtractionError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _pending_batch(db, subject: models.Subject, batch_name: str, questions: list, meta: dict, extraction: dict) -> dict:
    batch = models.QuestionImportBatch(
        subject_slug=subject.slug,
        batch_name=batch_name,
        parsed_questions=questions,
        meta={
            **meta,
            "uploaded_at": datetime.utcnow().isoformat(),
            "parsed_count": len(questions),
            "extraction": extraction,
        },
    )
    db.add(batch)
    db.commit()
    db.refresh(batch)
    logger.info("[Import] Batch %s: %d questions for %s", batch.id, len(questions), subject.slug)
    return {
        "batch_id": batch.id,
        "batch_name": batch.batch_name,
        "questions_count": len(questions),
        "questions": questions,
        "metadata": extraction,
    }


@router.post("/pdf", status_code=201)
def import_pdf(
    pdf: UploadFile = File(...),
    answer_key: Optional[UploadFile] = File(None, alias="answerKey"),
    subject_slug: str = Form(..., alias="subjectSlug"),
    batch_name: Optional[str] = Form(None, alias="batchName"),
    use_ai: bool = Form(True, alias="useAI"),
):
    """
    Extracts questions from an uploaded paper and stores them as a pending
    batch for review. Nothing is written to the question bank here.
    """
    with get_session() as db:
        subject = crud.get_subject(db, subject_slug)
        if not subject:
            raise HTTPException(status_code=400, detail="Valid subject slug is required")

        text = _read_pdf(pdf, "File")
        key_text = _read_pdf(answer_key, "Answer key") if answer_key is not None else None

        if use_ai:
            try:
                raw = llm.extract_questions(text, key_text)
            except LLMError as e:
                logger.error("[Import] AI extraction failed: %s", e)
                raise HTTPException(status_code=502, detail=str(e))
            questions = normalize_extracted_questions(raw)
            extraction = {"extraction_method": "ai", **(raw.get("metadata") or {})}
        else:
            logger.info("[Import] Using line parser (no AI)")
            questions = parse_questions_from_text(text)
            if key_text:
                questions = apply_answer_key(questions, parse_answer_key(key_text))
            extraction = {"extraction_method": "legacy"}

        if not questions:
            raise HTTPException(status_code=400, detail="No questions found in PDF. Please check the PDF format.")

        return _pending_batch(
            db, subject,
            batch_name or f"Import {datetime.utcnow().date().isoformat()}",
            questions,
            {
                "file_name": pdf.filename,
                "has_answer_key": answer_key is not None,
                "answer_key_file_name": answer_key.filename if answer_key is not None else None,
                "use_ai": use_ai,
            },
            extraction,
        )


@router.post("/csv", status_code=201)
def import_sheet(
    file: UploadFile = File(...),
    subject_slug: str = Form(..., alias="subjectSlug"),
    batch_name: Optional[str] = Form(None, alias="batchName"),
):
    """Same as the PDF import, for a CSV or .xlsx question bank."""
    with get_session() as db:
        subject = crud.get_subject(db, subject_slug)
        if not subject:
            raise HTTPException(status_code=400, detail="Valid subject slug is required")
        if file.content_type not in SHEET_TYPES:
            raise HTTPException(status_code=400, detail="File must be CSV or Excel format")

        data = file.file.read()
        try:
            rows = read_rows(data, file.filename, file.content_type)
        except SheetImportError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not rows:
            raise HTTPException(status_code=400, detail="No data found in file")
        questions = rows_to_questions(rows)
        if not questions:
            raise HTTPException(status_code=400, detail="No valid questions found in file")

        return _pending_batch(
            db, subject,
            batch_name or f"Import from {file.filename}",
            questions,
            {"file_name": file.filename, "file_size": len(data), "file_type": file.content_type},
            {"extraction_method": "sheet", "import_type": "csv" if is_csv(file.filename, file.content_type) else "xlsx"},
        )


@router.get("/batches/{batch_id}")
def get_batch(batch_id: str):
    with get_session() as db:
        return import_batch_out(_batch_or_404(db, batch_id))


@router.post("/batches/{batch_id}/cancel")
def cancel_batch(batch_id: str):
    with get_session() as db:
        batch = _batch_or_404(db, batch_id)
        if batch.status == "imported":
            raise HTTPException(status_code=400, detail="Batch is already imported")
        batch.status = "cancelled"
        db.commit()
        logger.info("[Import] Cancelled batch %s", batch.id)
        return import_batch_out(batch)


@router.post("/review")
def review_batch(payload: ReviewIn):
    with get_session() as db:
        batch = _batch_or_404(db, payload.batch_id)
        if batch.status in ("imported", "cancelled"):
            raise HTTPException(status_code=400, detail=f"Batch is already {batch.status}")
        batch.parsed_questions = payload.questions
        batch.status = "reviewed"
        if payload.batch_name:
            batch.batch_name = payload.batch_name
        db.commit()
        return {"batch_id": batch.id, "status": batch.status, "questions_count": len(payload.questions)}


def _answer_data(q: dict) -> dict:
    if isinstance(q.get("answer_data"), dict):
        return q["answer_data"]
    question_type = q.get("question_type") or "mcq_single"
    correct = q.get("correct_answer")
    options = [o or "" for o in q.get("options") or []]
    if question_type in MULTI_ANSWER_TYPES:
        return {"options": options, "correct": correct if isinstance(correct, list) else ([correct] if correct is not None else [])}
    if question_type == "true_false":
        return {"correct": bool(correct)}
    if isinstance(correct, list):
        correct = correct[0] if correct else None
    return {"options": options, "correct": correct if correct is not None else 0}


def _question_row(q: dict, subject: models.Subject, defaults: CommitIn) -> models.Question:
    text_mr = q.get("question_text_mr")
    text_en = q.get("question_text_en")
    question_type = q.get("question_type") or "mcq_single"
    if not text_mr and not text_en:
        raise HTTPException(status_code=400, detail=f"Question {q.get('question_number')} has no text")
    if question_type.startswith("mcq") and not isinstance(q.get("options"), list):
        raise HTTPException(status_code=400, detail=f"Question {q.get('question_number')} has no options")

    # scholarship papers are Marathi-first, everything else English-first
    if subject.slug.startswith("scholarship"):
        text, language = (text_mr, "mr") if text_mr else (text_en, "en")
    else:
        text, language = (text_en, "en") if text_en else (text_mr, "mr")

    if question_type not in models.QUESTION_TYPES:
        question_type = "mcq_single"
    difficulty = q.get("difficulty") or defaults.default_difficulty or "medium"
    if difficulty not in models.DIFFICULTIES:
        difficulty = "medium"

    return models.Question(
        subject_id=subject.id,
        chapter_id=q.get("chapter_id") or defaults.default_chapter_id,
        question_text=sanitize_html(text),
        question_language=language,
        question_type=question_type,
        difficulty=difficulty,
        answer_data=_answer_data({**q, "question_type": question_type}),
        explanation=sanitize_html(q.get("explanation")),
        class_level=q.get("class_level") or defaults.default_class_level,
        marks=q.get("marks") or defaults.default_marks or 1,
        is_active=True,
    )


@router.post("/commit")
def commit_batch(payload: CommitIn):
    with get_session() as db:
        batch = _batch_or_404(db, payload.batch_id)
        if batch.status in ("imported", "cancelled"):
            raise HTTPException(status_code=400, detail=f"Batch is already {batch.status}")
        if not batch.parsed_questions:
            raise HTTPException(status_code=400, detail="No questions in batch to import")

        subject = crud.get_subject(db, batch.subject_slug)
        if not subject:
            raise HTTPException(status_code=400, detail=f"Invalid subject: {batch.subject_slug}")
        if payload.default_chapter_id and not crud.subject_chapters(db, subject.id, [payload.default_chapter_id]):
            raise HTTPException(status_code=400, detail="Default chapter does not belong to this subject")
        chapter_ids = {q["chapter_id"] for q in batch.parsed_questions if q.get("chapter_id")}
        if chapter_ids:
            known = {c.id for c in crud.subject_chapters(db, subject.id, list(chapter_ids))}
            unknown = sorted(chapter_ids - known)
            if unknown:
                raise HTTPException(status_code=400, detail=f"Chapters not in this subject: {', '.join(unknown)}")

        rows = [_question_row(q, subject, payload) for q in batch.parsed_questions]
        db.add_all(rows)
        batch.status = "imported"
        batch.imported_at = datetime.utcnow()
        db.commit()
        logger.info("[Import] Committed batch %s: %d questions", batch.id, len(rows))
        return {
            "batch_id": batch.id,
            "imported_count": len(rows),
            "question_ids": [r.id for r in rows],
        }
