# routers/chapters.py
import logging

from fastapi import APIRouter, HTTPException

from db import get_session
import models
import crud
from allocator import distribute_questions, allocation_to_configs
from schemas import ChapterIn, ChapterUpdate, DistributeIn
from serializers import chapter_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chapters"])


@router.get("/subjects/{slug}/chapters")
def list_chapters(slug: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        return [chapter_out(c) for c in crud.subject_chapters(db, subject.id)]


@router.post("/subjects/{slug}/chapters", status_code=201)
def create_chapter(slug: str, payload: ChapterIn):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        data = payload.model_dump()
        if data["order_index"] is None:
            data["order_index"] = crud.next_order_index(
                db, models.Chapter.order_index, models.Chapter.subject_id == subject.id
            )
        chapter = models.Chapter(**data, subject_id=subject.id)
        db.add(chapter)
        db.commit()
        db.refresh(chapter)
        return chapter_out(chapter)


@router.get("/subjects/{slug}/chapters/with-counts")
def chapters_with_counts(slug: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        counts = crud.chapter_type_counts(db, subject.id)
        out = []
        for chapter in crud.subject_chapters(db, subject.id):
            by_type = counts.get(chapter.id, {})
            out.append({
                **chapter_out(chapter),
                "question_count": sum(by_type.values()),
                "question_counts": by_type,
            })
        return out


@router.get("/subjects/{slug}/chapters/{chapter_id}/question-counts")
def chapter_question_counts(slug: str, chapter_id: str):
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        chapter = crud.active_or_404(db, models.Chapter, chapter_id, "Chapter")
        if chapter.subject_id != subject.id:
            raise HTTPException(status_code=404, detail="Chapter not found")
        by_type = {t: 0 for t in models.QUESTION_TYPES}
        by_type.update(crud.chapter_type_counts(db, subject.id, [chapter.id]).get(chapter.id, {}))
        return {"chapter_id": chapter.id, "total": sum(by_type.values()), "by_type": by_type}


@router.post("/subjects/{slug}/chapters/distribute")
def distribute(slug: str, payload: DistributeIn):
    """
    Splits requiredCount over the subject's chapters (or the chosen ones)
    using the live count of active questions of the requested type.
    """
    with get_session() as db:
        subject = crud.subject_or_404(db, slug)
        chapters = crud.subject_chapters(db, subject.id, payload.chapter_ids)
        if payload.chapter_ids is not None:
            known = {c.id for c in chapters}
            missing = [cid for cid in payload.chapter_ids if cid not in known]
            if missing:
                raise HTTPException(status_code=400, detail=f"Unknown chapters: {', '.join(missing)}")

        counts = crud.chapter_type_counts(db, subject.id, [c.id for c in chapters])
        availability = [(c.id, counts.get(c.id, {}).get(payload.question_type, 0)) for c in chapters]

        try:
            allocation = distribute_questions(payload.required_count, availability)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        total_available = sum(n for _, n in availability)
        total_allocated = sum(allocation.values())
        logger.debug("[Distribute] %s %s: %s of %s", subject.slug, payload.question_type,
                     total_allocated, payload.required_count)
        return {
            "question_type": payload.question_type,
            "required_count": payload.required_count,
            "total_available": total_available,
            "total_allocated": total_allocated,
            "shortfall": payload.required_count - total_allocated,
            "chapter_configs": allocation_to_configs(allocation),
        }


@router.get("/chapters/{chapter_id}")
def get_chapter(chapter_id: str):
    with get_session() as db:
        return chapter_out(crud.active_or_404(db, models.Chapter, chapter_id, "Chapter"))


@router.patch("/chapters/{chapter_id}")
def update_chapter(chapter_id: str, payload: ChapterUpdate):
    with get_session() as db:
        chapter = crud.active_or_404(db, models.Chapter, chapter_id, "Chapter")
        crud.apply_changes(chapter, payload.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(chapter)
        return chapter_out(chapter)


@router.delete("/chapters/{chapter_id}")
def delete_chapter(chapter_id: str):
    with get_session() as db:
        chapter = crud.active_or_404(db, models.Chapter, chapter_id, "Chapter")
        chapter.is_active = False
        db.commit()
        return {"id": chapter.id, "deleted": True}
