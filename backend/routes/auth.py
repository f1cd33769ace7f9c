from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional
from models import User
from sessions import SessionService, bearer_token, get_session_service, require_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


def user_payload(user: User) -> dict:
    """Public view of a user; never includes the password hash."""
    return {
        "id": user.id,
        "username": user.username,
        "name": user.name,
        "role": user.role,
    }


@router.post("/login")
def login(body: LoginRequest, sessions: SessionService = Depends(get_session_service)):
    result = sessions.login(body.username, body.password)
    if result is None:
        raise HTTPException(401, "Invalid username or password")
    token, user = result
    return {"token": token, "user": user_payload(user)}


@router.post("/logout")
def logout(
    token: Optional[str] = Depends(bearer_token),
    sessions: SessionService = Depends(get_session_service),
):
    if not token:
        raise HTTPException(401, "Not authenticated")
    return {"logged_out": sessions.logout(token)}


@router.get("/me")
def me(user: User = Depends(require_user)):
    return user_payload(user)
