from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Literal, Optional
from database import get_db
from models import User
from routes.auth import user_payload
from seed import seed_default_users
from sessions import SessionService, get_session_service, hash_password, require_role

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(require_role("admin"))])

Role = Literal["admin", "manager", "staff"]


class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    name: str
    role: Role = "staff"


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = None
    role: Optional[Role] = None


@router.get("")
def list_users(db: Session = Depends(get_db)):
    return [user_payload(u) for u in db.query(User).order_by(User.id).all()]


@router.post("", status_code=201)
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.username == body.username).first():
        raise HTTPException(409, "Username already exists")
    user = User(
        username=body.username,
        name=body.name,
        role=body.role,
        password_hash=hash_password(body.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user_payload(user)


@router.patch("/{user_id}")
def update_user(user_id: int, body: UserUpdate, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(404, "User not found")

    if body.username is not None and body.username != user.username:
        if db.query(User).filter(User.username == body.username).first():
            raise HTTPException(409, "Username already exists")
        user.username = body.username
    if body.name is not None:
        user.name = body.name
    if body.role is not None:
        user.role = body.role

    db.commit()
    db.refresh(user)
    return user_payload(user)


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    sessions: SessionService = Depends(get_session_service),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(404, "User not found")
    sessions.forget_user(user_id)
    db.delete(user)
    db.commit()
    return {"message": "Deleted", "id": user_id}


@router.post("/reset")
def reset_users(db: Session = Depends(get_db)):
    """Restore the default user set. Every session, the caller's included, ends."""
    created = seed_default_users(db=db, reset=True)
    return {"message": f"Reset to {created} default users"}
