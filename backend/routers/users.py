# routers/users.py
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from db import get_session
import models
import crud
from schemas import UserIn, UserUpdate
from serializers import profile_out
from utils import sanitize_search_query

router = APIRouter(prefix="/users", tags=["users"])


def _check_unique(db, changes: dict, exclude_id: Optional[str] = None):
    for field in ("email", "phone"):
        value = changes.get(field)
        if not value:
            continue
        query = db.query(models.Profile).filter(getattr(models.Profile, field) == value)
        if exclude_id:
            query = query.filter(models.Profile.id != exclude_id)
        if db.query(query.exists()).scalar():
            raise HTTPException(status_code=409, detail=f"A user with this {field} already exists")


def _check_school(db, school_id: Optional[str]):
    if school_id and not db.query(models.School).filter(models.School.id == school_id).first():
        raise HTTPException(status_code=400, detail="School not found")


@router.get("")
def list_users(
    role: Optional[str] = None,
    school_id: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    with get_session() as db:
        query = db.query(models.Profile).filter(models.Profile.is_active.is_(True))
        if role:
            query = query.filter(models.Profile.role == role)
        if school_id:
            query = query.filter(models.Profile.school_id == school_id)
        term = sanitize_search_query(search)
        if term:
            query = query.filter(
                models.Profile.name.ilike(f"%{term}%") | models.Profile.email.ilike(f"%{term}%")
            )
        return crud.paginate(query.order_by(models.Profile.created_at.desc()), page, page_size, profile_out)


@router.post("", status_code=201)
def create_user(payload: UserIn):
    if not payload.email and not payload.phone:
        raise HTTPException(status_code=400, detail="Either email or phone is required")
    with get_session() as db:
        data = payload.model_dump()
        _check_unique(db, data)
        _check_school(db, data["school_id"])
        user = models.Profile(**data)
        db.add(user)
        if user.school_id:
            db.query(models.School).filter(models.School.id == user.school_id).update(
                {models.School.student_count: models.School.student_count + 1}
            )
        db.commit()
        db.refresh(user)
        return profile_out(user)


@router.get("/{user_id}")
def get_user(user_id: str):
    with get_session() as db:
        return profile_out(crud.active_or_404(db, models.Profile, user_id, "User"))


@router.patch("/{user_id}")
def update_user(user_id: str, payload: UserUpdate):
    with get_session() as db:
        user = crud.active_or_404(db, models.Profile, user_id, "User")
        changes = payload.model_dump(exclude_unset=True)
        if not changes.get("email", user.email) and not changes.get("phone", user.phone):
            raise HTTPException(status_code=400, detail="Either email or phone is required")
        _check_unique(db, changes, exclude_id=user.id)
        _check_school(db, changes.get("school_id"))
        crud.apply_changes(user, changes)
        db.commit()
        db.refresh(user)
        return profile_out(user)


@router.delete("/{user_id}")
def delete_user(user_id: str):
    with get_session() as db:
        user = crud.active_or_404(db, models.Profile, user_id, "User")
        user.is_active = False
        db.commit()
        return {"id": user.id, "deleted": True}
