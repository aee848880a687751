# survey_api/core/security.py
"""
Contraseñas (passlib) y tokens de acceso (PyJWT), más las dependencias que
resuelven el usuario de la petición.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from survey_api.core.config import settings
from survey_api.db.session import get_db
from survey_api.models.user import User

TOKEN_URL = "/api/v1/auth/login"
CLOCK_SKEW_SECONDS = 5

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=TOKEN_URL)
oauth2_optional = OAuth2PasswordBearer(tokenUrl=TOKEN_URL, auto_error=False)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


# -------------------- contraseñas -------------------- #

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # hash con formato desconocido
        return False


# -------------------- tokens -------------------- #

def create_access_token(claims: dict[str, Any], expires_minutes: Optional[int] = None) -> str:
    """JWT firmado con los claims dados más iat/exp; 'sub' siempre como texto."""
    issued = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=settings.JWT_EXPIRE_MINUTES if expires_minutes is None else expires_minutes)

    body = dict(claims)
    if "sub" in body:
        body["sub"] = str(body["sub"])
    body["iat"] = int(issued.timestamp())
    body["exp"] = issued + lifetime
    return jwt.encode(body, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
            leeway=CLOCK_SKEW_SECONDS,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expirado")
    except jwt.InvalidTokenError:
        raise _unauthorized("Token inválido")


# -------------------- dependencias -------------------- #

def _user_from_token(token: str, db: Session) -> User:
    subject = decode_token(token).get("sub")
    try:
        user_id = UUID(str(subject))
    except ValueError:
        raise _unauthorized("Token sin usuario válido")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("Usuario no encontrado o inactivo")
    return user


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    return _user_from_token(token, db)


def get_optional_user(
    token: Optional[str] = Depends(oauth2_optional),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Como get_current_user, pero None cuando la petición no trae token."""
    if not token:
        return None
    return _user_from_token(token, db)
