from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import HTTPException, status
from .config import get_settings


pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")
settings = get_settings()
ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_token(data: dict, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=ALGORITHM)


def access_token_ttl() -> timedelta:
    return timedelta(minutes=settings.jwt_access_expire_min)


def refresh_token_ttl() -> timedelta:
    return timedelta(days=settings.jwt_refresh_expire_days)


def issue_tokens(user_id: int) -> tuple[str, str]:
    """Access and refresh token for `user_id`, in that order."""
    subject = str(user_id)
    access = create_token({"sub": subject, "type": "access"}, access_token_ttl())
    refresh = create_token({"sub": subject, "type": "refresh"}, refresh_token_ttl())
    return access, refresh


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except JWTError as exc:  # pragma: no cover - simple wrapper
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
