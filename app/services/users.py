"""User store: accounts, credential checks and per-user code-session history."""
import itertools
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateEmailError, InvalidCredentialsError
from app.core.security import hash_password, verify_password
from app.models import CodeSession, User
from app.schemas.auth import UserOutSchema, UserSummarySchema
from app.schemas.code import HistoryEntrySchema

logger = logging.getLogger(__name__)


def public_user(user) -> dict:
    """{id, email, name, createdAt}; works for ORM rows and in-memory records."""
    return UserOutSchema.model_validate(user).model_dump(by_alias=True, mode="json")


def history_entry(
    session_id: int,
    data: dict[str, Any],
    timestamp: datetime | None,
) -> dict:
    return HistoryEntrySchema(
        id=session_id,
        type=data["type"],
        code=data["code"],
        language=data["language"],
        target_language=data.get("targetLanguage"),
        result=data.get("result") or {},
        timestamp=timestamp,
    ).model_dump(by_alias=True, mode="json")


class UserStore(Protocol):
    async def create(self, email: str, password: str, name: str = "") -> dict: ...

    async def authenticate(self, email: str, password: str) -> dict: ...

    async def find_by_id(self, user_id: int) -> dict | None: ...

    async def find_by_email(self, email: str) -> dict | None: ...

    async def add_session(self, user_id: int, data: dict[str, Any]) -> bool: ...

    async def list_sessions(self, user_id: int) -> list[dict]: ...

    async def list_users(self) -> list[dict]: ...


class SqlUserStore:
    """SQLAlchemy-backed store; the unique index on users.email guards duplicates."""

    def __init__(self, db: AsyncSession, history_limit: int = 50):
        self.db = db
        self.history_limit = history_limit

    async def _get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create(self, email: str, password: str, name: str = "") -> dict:
        if await self._get_by_email(email) is not None:
            raise DuplicateEmailError()

        hashed = await run_in_threadpool(hash_password, password)
        user = User(email=email, hashed_password=hashed, name=name or "")
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateEmailError() from e
        await self.db.refresh(user)
        logger.info("Created user id=%s", user.id)
        return public_user(user)

    async def authenticate(self, email: str, password: str) -> dict:
        user = await self._get_by_email(email)
        if user is None:
            raise InvalidCredentialsError()
        if not await run_in_threadpool(verify_password, password, user.hashed_password):
            raise InvalidCredentialsError()
        return public_user(user)

    async def find_by_id(self, user_id: int) -> dict | None:
        user = await self.db.get(User, user_id)
        return public_user(user) if user else None

    async def find_by_email(self, email: str) -> dict | None:
        user = await self._get_by_email(email)
        return public_user(user) if user else None

    async def add_session(self, user_id: int, data: dict[str, Any]) -> bool:
        if await self.db.get(User, user_id) is None:
            return False

        self.db.add(
            CodeSession(
                user_id=user_id,
                type=data["type"],
                code=data["code"],
                language=data["language"],
                target_language=data.get("targetLanguage"),
                result_json=json.dumps(data.get("result") or {}),
            )
        )
        await self.db.flush()

        # evict everything older than the newest history_limit entries
        stale = await self.db.execute(
            select(CodeSession.id)
            .where(CodeSession.user_id == user_id)
            .order_by(CodeSession.id.desc())
            .offset(self.history_limit)
        )
        stale_ids = stale.scalars().all()
        if stale_ids:
            await self.db.execute(delete(CodeSession).where(CodeSession.id.in_(stale_ids)))
        await self.db.commit()
        return True

    async def list_sessions(self, user_id: int) -> list[dict]:
        result = await self.db.execute(
            select(CodeSession).where(CodeSession.user_id == user_id).order_by(CodeSession.id)
        )
        return [
            history_entry(
                s.id,
                {
                    "type": s.type,
                    "code": s.code,
                    "language": s.language,
                    "targetLanguage": s.target_language,
                    "result": json.loads(s.result_json),
                },
                s.created_at,
            )
            for s in result.scalars().all()
        ]

    async def list_users(self) -> list[dict]:
        result = await self.db.execute(
            select(User, func.count(CodeSession.id))
            .outerjoin(CodeSession, CodeSession.user_id == User.id)
            .group_by(User.id)
            .order_by(User.id)
        )
        return [
            UserSummarySchema(
                id=user.id,
                email=user.email,
                name=user.name,
                created_at=user.created_at,
                sessions_count=count,
            ).model_dump(by_alias=True, mode="json")
            for user, count in result.all()
        ]


@dataclass
class UserRecord:
    id: int
    email: str
    hashed_password: str
    name: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sessions: list[dict] = field(default_factory=list)


class InMemoryUserStore:
    """Process-local store used by tests and throwaway runs."""

    def __init__(self, history_limit: int = 50):
        self.history_limit = history_limit
        self.users: list[UserRecord] = []
        self._user_ids = itertools.count(1)
        self._session_ids = itertools.count(1)

    def _find(self, email: str) -> UserRecord | None:
        return next((u for u in self.users if u.email == email), None)

    def _get(self, user_id: int) -> UserRecord | None:
        return next((u for u in self.users if u.id == user_id), None)

    async def create(self, email: str, password: str, name: str = "") -> dict:
        if self._find(email) is not None:
            raise DuplicateEmailError()

        hashed = await run_in_threadpool(hash_password, password)

        # another signup for the same email may have finished while hashing;
        # no await between this check and the append
        if self._find(email) is not None:
            raise DuplicateEmailError()
        user = UserRecord(id=next(self._user_ids), email=email, hashed_password=hashed, name=name or "")
        self.users.append(user)
        return public_user(user)

    async def authenticate(self, email: str, password: str) -> dict:
        user = self._find(email)
        if user is None:
            raise InvalidCredentialsError()
        if not await run_in_threadpool(verify_password, password, user.hashed_password):
            raise InvalidCredentialsError()
        return public_user(user)

    async def find_by_id(self, user_id: int) -> dict | None:
        user = self._get(user_id)
        return public_user(user) if user else None

    async def find_by_email(self, email: str) -> dict | None:
        user = self._find(email)
        return public_user(user) if user else None

    async def add_session(self, user_id: int, data: dict[str, Any]) -> bool:
        user = self._get(user_id)
        if user is None:
            return False
        user.sessions.append(history_entry(next(self._session_ids), data, datetime.now(timezone.utc)))
        del user.sessions[: -self.history_limit]
        return True

    async def list_sessions(self, user_id: int) -> list[dict]:
        user = self._get(user_id)
        return list(user.sessions) if user else []

    async def list_users(self) -> list[dict]:
        return [
            UserSummarySchema(
                id=u.id,
                email=u.email,
                name=u.name,
                created_at=u.created_at,
                sessions_count=len(u.sessions),
            ).model_dump(by_alias=True, mode="json")
            for u in self.users
        ]
