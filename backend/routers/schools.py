# routers/schools.py
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from db import get_session
import models
import crud
from schemas import SchoolIn, SchoolUpdate
from serializers import school_out
from utils import normalize_school_name, sanitize_search_query

router = APIRouter(prefix="/schools", tags=["schools"])


def _school_or_404(db, school_id: str) -> models.School:
    school = db.query(models.School).filter(models.School.id == school_id).first()
    if not school:
        raise HTTPException(status_code=404, detail="School not found")
    return school


def _duplicate(db, name_search: str, city: Optional[str], exclude_id: Optional[str] = None) -> bool:
    query = db.query(models.School).filter(
        models.School.name_search == name_search,
        models.School.location_city == city,
    )
    if exclude_id:
        query = query.filter(models.School.id != exclude_id)
    return db.query(query.exists()).scalar()


@router.get("")
def list_schools(
    search: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    verified: Optional[bool] = None,
    user_added: Optional[bool] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    with get_session() as db:
        query = db.query(models.School)
        term = normalize_school_name(sanitize_search_query(search))
        if term:
            query = query.filter(models.School.name_search.contains(term))
        if city:
            query = query.filter(models.School.location_city == city)
        if state:
            query = query.filter(models.School.location_state == state)
        if verified is not None:
            query = query.filter(models.School.is_verified.is_(verified))
        if user_added is not None:
            query = query.filter(models.School.is_user_added.is_(user_added))
        return crud.paginate(query.order_by(models.School.name), page, page_size, school_out)


@router.post("", status_code=201)
def create_school(payload: SchoolIn):
    with get_session() as db:
        name = " ".join(payload.name.split())
        name_search = normalize_school_name(name)
        if _duplicate(db, name_search, payload.location_city):
            raise HTTPException(status_code=409, detail="A school with this name already exists in this city")
        school = models.School(**payload.model_dump(exclude={"name"}), name=name, name_search=name_search)
        db.add(school)
        db.commit()
        db.refresh(school)
        return school_out(school)


@router.get("/search")
def search_schools(q: str = "", limit: int = Query(20, ge=1, le=50)):
    """Name search; verified schools first."""
    term = normalize_school_name(sanitize_search_query(q))
    if len(term) < 2:
        return []
    with get_session() as db:
        rows = (
            db.query(models.School)
            .filter(models.School.name_search.contains(term))
            .order_by(models.School.is_verified.desc(), models.School.name)
            .limit(limit)
            .all()
        )
        return [school_out(s) for s in rows]


@router.get("/suggest")
def suggest_schools(q: str = "", limit: int = Query(10, ge=1, le=20)):
    """Autocomplete: names starting with q."""
    term = normalize_school_name(sanitize_search_query(q))
    if not term:
        return []
    with get_session() as db:
        rows = (
            db.query(models.School)
            .filter(models.School.name_search.startswith(term))
            .order_by(models.School.student_count.desc(), models.School.name)
            .limit(limit)
            .all()
        )
        return [
            {"id": s.id, "name": s.name, "location_city": s.location_city, "is_verified": s.is_verified}
            for s in rows
        ]


@router.get("/{school_id}")
def get_school(school_id: str):
    with get_session() as db:
        return school_out(_school_or_404(db, school_id))


@router.patch("/{school_id}")
def update_school(school_id: str, payload: SchoolUpdate):
    with get_session() as db:
        school = _school_or_404(db, school_id)
        changes = payload.model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = " ".join(changes["name"].split())
            changes["name_search"] = normalize_school_name(changes["name"])
        name_search = changes.get("name_search", school.name_search)
        city = changes.get("location_city", school.location_city)
        if _duplicate(db, name_search, city, exclude_id=school.id):
            raise HTTPException(status_code=409, detail="A school with this name already exists in this city")
        crud.apply_changes(school, changes)
        db.commit()
        db.refresh(school)
        return school_out(school)


@router.delete("/{school_id}")
def delete_school(school_id: str):
    with get_session() as db:
        school = _school_or_404(db, school_id)
        db.delete(school)
        db.commit()
        return {"id": school_id, "deleted": True}
