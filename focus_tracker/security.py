from __future__ import annotations

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.orm import Session

from .config import get_settings
from .db import get_db
from .errors import AuthenticationError
from .models import User

_bearer = HTTPBearer(auto_error=False)
_TOKEN_SALT = "focus-tracker-auth"


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(get_settings().secret_key, salt=_TOKEN_SALT)


def create_access_token(user_id: str) -> str:
    return _serializer().dumps({"userId": user_id})


def read_access_token(token: str) -> str:
    """Return the user id carried by ``token`` or raise ``AuthenticationError``."""
    try:
        payload = _serializer().loads(token, max_age=get_settings().token_max_age_seconds)
    except SignatureExpired as exc:
        raise AuthenticationError("Token expired") from exc
    except BadSignature as exc:
        raise AuthenticationError("Invalid token") from exc
    user_id = payload.get("userId") if isinstance(payload, dict) else None
    if not user_id:
        raise AuthenticationError("Invalid token")
    return user_id


def authenticate_token(db: Session, token: str | None) -> User:
    if not token:
        raise AuthenticationError("No token provided")
    user_id = read_access_token(token)
    user = db.query(User).filter(User.id == user_id).one_or_none()
    if not user or not user.is_active:
        raise AuthenticationError("User not found")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials and credentials.scheme.lower() == "bearer" else None
    return authenticate_token(db, token)
