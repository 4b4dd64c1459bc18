# pos_backend/routes/users.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Literal, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from pos_backend.database import get_db
from pos_backend.models.users import User
from pos_backend.schemas.user import UserCreate, UserResponse, UsersPage
from pos_backend.utils.hashing import get_password_hash
from pos_backend.utils.tokenJWT import admin_required

router = APIRouter(prefix="/users", tags=["Users"])


# Retrieve a list of users with filtering, sorting, and pagination (Admin only)
@router.get("", response_model=UsersPage)
def list_users(
    q: Optional[str] = Query(None, description="Search by name or e-mail"),
    role: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "name", "role"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(User)
    if q:
        like = f"%{q}%"
        query = query.filter(User.email.ilike(like) | User.name.ilike(like))
    if role:
        query = query.filter(User.role.ilike(role))

    sort_map = {"id": User.id, "email": User.email, "name": User.name, "role": User.role}
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": users, "total": total, "page": page, "page_size": page_size}


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    email = payload.email.strip().lower()
    if db.query(User.id).filter(func.lower(User.email) == email).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(name=payload.name.strip(), email=email,
                password_hash=get_password_hash(payload.password), role=payload.role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
