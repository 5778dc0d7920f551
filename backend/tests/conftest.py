"""
NotaryPro Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh SQLite database file (aiosqlite) with the full
       schema created from the models. Service tests use `db_session`;
       endpoint tests use `test_client`, whose requests run on sessions from
       the same database through a dependency override.

Fixture Hierarchy:
    Function-scoped:
    ├── engine / session_factory: per-test database
    ├── db_session: one AsyncSession, rolled back at teardown
    ├── make_user / make_document / make_pos_location: factories
    ├── auth_headers: bearer token plus its session row
    └── test_client: HTTPX AsyncClient bound to the FastAPI app
"""

import os

# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-value-for-the-suite"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = ""
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["NOTIFICATION_RETRY_ATTEMPTS"] = "2"
os.environ["NOTIFICATION_RETRY_WAIT"] = "0"

from decimal import Decimal
from itertools import count
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.models  # noqa: F401
from app.database import Base, get_db_session
from app.models.enums import DocumentStatus, DocumentType, UserRole
from app.models.user import User
from app.repositories.document_repository import DocumentRepository
from app.repositories.pos_location_repository import PosLocationRepository
from app.repositories.user_repository import SessionRepository, UserRepository
from app.security import create_access_token, hash_password

TEST_PASSWORD = "correct-horse-battery"
_PASSWORD_HASH = hash_password(TEST_PASSWORD)

_sequence = count(1)


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    """
    Per-test SQLite database with the schema created.

    pysqlite/aiosqlite emit their own BEGIN lazily, which breaks SAVEPOINT
    handling; the two listeners hand transaction control to SQLAlchemy.
    """
    db_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'notarypro_test.db'}",
        poolclass=NullPool,
    )

    @event.listens_for(db_engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(db_engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


# ══════════════════════════════════════════════════════════════════════════
# Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user():
    """
    Create a user with TEST_PASSWORD.

    Usage:
        certifier = await make_user(db_session, UserRole.CERTIFICADOR)
    """

    async def _make(db: AsyncSession, role: UserRole = UserRole.USUARIO_FINAL, **fields) -> User:
        n = next(_sequence)
        values = {
            "email": f"user{n}@notarypro.cl",
            "first_name": "Test",
            "last_name": f"User{n}",
            "role": role,
            "password_hash": _PASSWORD_HASH,
        }
        values.update(fields)
        return await UserRepository().create(db, **values)

    return _make


@pytest.fixture
def make_pos_location():
    async def _make(db: AsyncSession, owner: User, **fields):
        values = {"name": "Kiosko Central", "address": "Av. Siempre Viva 742", "owner_id": owner.id}
        values.update(fields)
        return await PosLocationRepository().create(db, **values)

    return _make


@pytest.fixture
def make_document():
    """
    Insert a document directly in the given status (no workflow involved).

    Usage:
        doc = await make_document(db_session, submitter, status=DocumentStatus.PENDING_CERTIFICATION)
    """

    async def _make(
        db: AsyncSession,
        submitter: User,
        status: DocumentStatus = DocumentStatus.PENDING_CERTIFICATION,
        **fields,
    ):
        values = {
            "type": DocumentType.DECLARACION_JURADA,
            "status": status,
            "title": "Declaración jurada de residencia",
            "content": {"address": "Av. Siempre Viva 742"},
            "price": Decimal("10000.00"),
            "submitter_id": submitter.id,
        }
        values.update(fields)
        return await DocumentRepository().create(db, **values)

    return _make


@pytest.fixture
def auth_headers():
    """
    Mint a token plus its session row; returns Authorization headers.

    Usage:
        headers = await auth_headers(db, user)
    """

    async def _issue(db: AsyncSession, user: User) -> Dict[str, str]:
        token, jti, expires_at = create_access_token(user)
        await SessionRepository().create(db, sid=jti, user_id=user.id, expire=expires_at)
        return {"Authorization": f"Bearer {token}"}

    return _issue


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the app in-process.

    Each request gets its own session on the per-test database, committed
    on success like in production. Seed data with a separate session and
    commit it before sending requests.
    """
    from app.main import app

    async def _override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
