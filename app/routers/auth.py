"""Auth routes: signup, login, me, verify. Stateless JWT bearer tokens."""
import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.errors import DuplicateEmailError, InvalidCredentialsError, TokenError
from app.core.security import create_access_token, decode_access_token
from app.db.session import get_db
from app.schemas.auth import AuthUserSchema, LoginSchema, SignupSchema
from app.services.users import SqlUserStore, UserStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
settings = get_settings()

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt hard limit: 72 bytes (UTF-8)
MAX_PASSWORD_BYTES = 72


async def get_user_store(db: Annotated[AsyncSession, Depends(get_db)]) -> UserStore:
    return SqlUserStore(db, history_limit=settings.session_history_limit)


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "No token provided, authorization denied")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token format")
    return token


async def get_current_user(
    store: Annotated[UserStore, Depends(get_user_store)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthUserSchema:
    """Resolve the bearer token to a user or fail with 401."""
    token = _bearer_token(authorization)
    try:
        claims = decode_access_token(token)
    except TokenError as e:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, str(e)) from e

    user = await store.find_by_id(claims["userId"])
    if user is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token is not valid - user not found")
    return AuthUserSchema(id=user["id"], email=user["email"], name=user["name"])


async def get_current_user_optional(
    store: Annotated[UserStore, Depends(get_user_store)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthUserSchema | None:
    """Same as get_current_user, but any failure means anonymous."""
    if not authorization:
        return None
    try:
        return await get_current_user(store, authorization)
    except HTTPException:
        return None


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupSchema,
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """Create an account and return it with a fresh token."""
    email = (payload.email or "").strip()
    password = payload.password or ""

    if not email or not password:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Email and password are required")
    if not EMAIL_RE.match(email):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Please provide a valid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Password must be at least 6 characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Password must be at most 72 bytes long")

    try:
        user = await store.create(email, password, payload.name or "")
    except DuplicateEmailError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e)) from e

    return {
        "success": True,
        "message": "User created successfully",
        "data": {"user": user, "token": create_access_token(user["id"])},
    }


@router.post("/login")
async def login(
    payload: LoginSchema,
    store: Annotated[UserStore, Depends(get_user_store)],
):
    """Check credentials; return the user and a fresh token."""
    email = (payload.email or "").strip()
    password = payload.password or ""
    if not email or not password:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Email and password are required")

    try:
        user = await store.authenticate(email, password)
    except InvalidCredentialsError as e:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, str(e)) from e

    return {
        "success": True,
        "message": "Login successful",
        "data": {"user": user, "token": create_access_token(user["id"])},
    }


@router.get("/me")
async def me(current_user: Annotated[AuthUserSchema, Depends(get_current_user)]):
    """The user the bearer token belongs to."""
    return {"success": True, "data": {"user": current_user.model_dump()}}


@router.post("/verify")
async def verify(current_user: Annotated[AuthUserSchema, Depends(get_current_user)]):
    """Confirm the bearer token is still valid."""
    return {"success": True, "message": "Token is valid", "data": {"user": current_user.model_dump()}}


@router.get("/users")
async def list_users(store: Annotated[UserStore, Depends(get_user_store)]):
    """Every account with its history size; development mode only."""
    if not settings.is_development:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Route not found")
    return {"success": True, "data": await store.list_users()}
