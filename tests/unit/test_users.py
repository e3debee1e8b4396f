import asyncio
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.errors import DuplicateEmailError, InvalidCredentialsError
from app.db.base import Base
from app.services.users import InMemoryUserStore, SqlUserStore, public_user


def session_data(code):
    return {"type": "analyze", "code": code, "language": "Python", "result": {"output": code}}


class TestInMemoryUserStore:
    def test_create_returns_public_projection(self):
        store = InMemoryUserStore()
        user = asyncio.run(store.create("ada@example.com", "secret123", "Ada"))
        assert user["id"] == 1
        assert user["email"] == "ada@example.com"
        assert user["name"] == "Ada"
        assert "createdAt" in user
        assert not any("password" in key.lower() for key in user)

    def test_duplicate_email(self):
        store = InMemoryUserStore()

        async def scenario():
            await store.create("ada@example.com", "secret123")
            await store.create("ada@example.com", "another1")

        with pytest.raises(DuplicateEmailError):
            asyncio.run(scenario())

    def test_email_is_case_sensitive(self):
        store = InMemoryUserStore()

        async def scenario():
            await store.create("ada@example.com", "secret123")
            return await store.create("Ada@example.com", "secret123")

        assert asyncio.run(scenario())["id"] == 2

    def test_concurrent_signups_one_wins(self):
        store = InMemoryUserStore()

        async def scenario():
            return await asyncio.gather(
                store.create("ada@example.com", "secret123"),
                store.create("ada@example.com", "secret123"),
                return_exceptions=True,
            )

        results = asyncio.run(scenario())
        assert sum(isinstance(r, DuplicateEmailError) for r in results) == 1
        assert len(store.users) == 1

    def test_authenticate_same_error_for_both_failures(self):
        store = InMemoryUserStore()
        asyncio.run(store.create("ada@example.com", "secret123"))

        with pytest.raises(InvalidCredentialsError) as unknown:
            asyncio.run(store.authenticate("bob@example.com", "secret123"))
        with pytest.raises(InvalidCredentialsError) as wrong:
            asyncio.run(store.authenticate("ada@example.com", "wrong-pass"))
        assert str(unknown.value) == str(wrong.value)

    def test_history_is_bounded(self):
        store = InMemoryUserStore(history_limit=3)

        async def scenario():
            user = await store.create("ada@example.com", "secret123")
            for i in range(5):
                await store.add_session(user["id"], session_data(f"c{i}"))
            return await store.list_sessions(user["id"])

        sessions = asyncio.run(scenario())
        assert [s["code"] for s in sessions] == ["c2", "c3", "c4"]
        assert sessions[0]["result"] == {"output": "c2"}

    def test_add_session_unknown_user(self):
        store = InMemoryUserStore()
        assert asyncio.run(store.add_session(99, session_data("x"))) is False
        assert asyncio.run(store.list_sessions(99)) == []


def run_with_sql_store(tmp_path, scenario, history_limit=2):
    async def runner():
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/users.db", poolclass=NullPool)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        try:
            async with async_sessionmaker(engine, expire_on_commit=False)() as db:
                return await scenario(SqlUserStore(db, history_limit=history_limit))
        finally:
            await engine.dispose()

    return asyncio.run(runner())


class TestSqlUserStore:
    def test_create_and_find(self, tmp_path):
        async def scenario(store):
            created = await store.create("ada@example.com", "secret123", "Ada")
            return created, await store.find_by_id(created["id"]), await store.find_by_email("ada@example.com")

        created, by_id, by_email = run_with_sql_store(tmp_path, scenario)
        assert created["email"] == "ada@example.com"
        assert by_id["id"] == created["id"]
        assert by_email["name"] == "Ada"

    def test_duplicate_email(self, tmp_path):
        async def scenario(store):
            await store.create("ada@example.com", "secret123")
            await store.create("ada@example.com", "secret123")

        with pytest.raises(DuplicateEmailError):
            run_with_sql_store(tmp_path, scenario)

    def test_authenticate(self, tmp_path):
        async def scenario(store):
            await store.create("ada@example.com", "secret123")
            user = await store.authenticate("ada@example.com", "secret123")
            with pytest.raises(InvalidCredentialsError):
                await store.authenticate("ada@example.com", "wrong-pass")
            return user

        assert run_with_sql_store(tmp_path, scenario)["email"] == "ada@example.com"

    def test_history_bounded_and_counted(self, tmp_path):
        async def scenario(store):
            user = await store.create("ada@example.com", "secret123")
            for i in range(3):
                assert await store.add_session(user["id"], session_data(f"c{i}"))
            assert await store.add_session(999, session_data("x")) is False
            return await store.list_sessions(user["id"]), await store.list_users()

        sessions, users = run_with_sql_store(tmp_path, scenario)
        assert [s["code"] for s in sessions] == ["c1", "c2"]
        assert sessions[-1]["result"] == {"output": "c2"}
        assert users[0]["sessionsCount"] == 2

    def test_timestamps_are_utc(self, tmp_path):
        async def scenario(store):
            user = await store.create("ada@example.com", "secret123")
            await store.add_session(user["id"], session_data("c0"))
            return await store.find_by_id(user["id"]), await store.list_sessions(user["id"])

        user, sessions = run_with_sql_store(tmp_path, scenario)
        assert user["createdAt"].endswith(("Z", "+00:00"))
        assert sessions[0]["timestamp"].endswith(("Z", "+00:00"))


class TestPublicUser:
    def row(self, created_at):
        return SimpleNamespace(id=1, email="ada@example.com", name="Ada", created_at=created_at)

    def test_naive_timestamp_read_as_utc(self):
        user = public_user(self.row(datetime(2024, 1, 2, 3, 4, 5)))
        assert user["createdAt"] in ("2024-01-02T03:04:05Z", "2024-01-02T03:04:05+00:00")

    def test_aware_timestamp_kept(self):
        user = public_user(self.row(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2)))))
        assert user["createdAt"] == "2024-01-02T03:04:05+02:00"

    def test_in_memory_and_sql_agree_on_zone(self, tmp_path):
        memory = asyncio.run(InMemoryUserStore().create("ada@example.com", "secret123"))

        async def scenario(store):
            return await store.create("ada@example.com", "secret123")

        sql = run_with_sql_store(tmp_path, scenario)
        assert memory["createdAt"].endswith(("Z", "+00:00"))
        assert memory["createdAt"][-1] == sql["createdAt"][-1]
