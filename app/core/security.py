"""Password hashing and JWT bearer tokens."""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings
from app.core.errors import TokenExpiredError, TokenInvalidError

# Used only when JWT_SECRET is unset (local development)
DEV_JWT_SECRET = "default-jwt-secret-for-demo-only-change-in-production"

_contexts: dict[int, CryptContext] = {}


def _pwd_context() -> CryptContext:
    rounds = get_settings().bcrypt_rounds
    if rounds not in _contexts:
        _contexts[rounds] = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
    return _contexts[rounds]


def verify_password(plain: str, hashed: str) -> bool:
    return _pwd_context().verify(plain, hashed)


def hash_password(password: str) -> str:
    return _pwd_context().hash(password)


def _secret() -> str:
    return get_settings().jwt_secret or DEV_JWT_SECRET


def create_access_token(user_id: int, extra: dict[str, Any] | None = None) -> str:
    """Sign a token carrying userId; expires after access_token_expire_minutes."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {"userId": user_id, "iat": now, "exp": expire}
    if extra:
        to_encode.update(extra)
    return jwt.encode(to_encode, _secret(), algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict:
    """Return the token claims or raise TokenExpiredError / TokenInvalidError."""
    settings = get_settings()
    try:
        claims = jwt.decode(token, _secret(), algorithms=[settings.algorithm])
    except ExpiredSignatureError as exc:
        raise TokenExpiredError() from exc
    except JWTError as exc:
        raise TokenInvalidError() from exc
    if not isinstance(claims.get("userId"), int):
        raise TokenInvalidError()
    return claims
