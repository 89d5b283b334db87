"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.database import get_db
from src.schemas.auth import AuthResponse, SignupResponse, UserLogin, UserSignup
from src.services.auth import create_user, login

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    user_data: UserSignup,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user."""
    user = create_user(db, user_data.email, user_data.password, user_data.name)
    return SignupResponse(message="User created!", user_id=str(user.id))


@router.post("/login", response_model=AuthResponse)
def login_user(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with email and password."""
    token, user = login(db, credentials.email, credentials.password)
    return AuthResponse(token=token, user_id=str(user.id))
