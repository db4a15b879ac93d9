from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import AuthenticationError, ConflictError
from ..models import User
from ..responses import success
from ..schemas.auth import LoginRequest, RegisterRequest
from ..schemas.serializers import serialize
from ..security import create_access_token, get_current_user, get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
async def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    email = payload.email.lower()
    existing = db.query(User).filter(User.email == email).one_or_none()
    if existing:
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        username=payload.username.strip(),
        password_hash=get_password_hash(payload.password),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return success({"user": serialize(user), "token": create_access_token(user.id)}, status_code=201)


@router.post("/login")
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.lower()).one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthenticationError("Account is disabled")
    return success({"user": serialize(user), "token": create_access_token(user.id)})


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return success(serialize(user))
