"""Shared fixtures: an in-memory database, a seeded pair of tenants and an API client."""

from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies import get_ollama_client
from app.core.exceptions import AIServiceException
from app.core.rate_limiter import limiter
from app.core.security import create_access_token
from app.database.base import Base
from app.database.session import get_db
from app.main import app
from app.services import company as company_service
from app.services import user as user_service

PASSWORD = "secret-password"

limiter.enabled = False


class FakeOllamaClient:
    """Stands in for the model server: returns a canned reply and records prompts."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[List[Dict[str, str]]] = []

    async def chat(self, messages: List[Dict[str, str]]) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def tenant(db):
    """
    Two companies. Acme has an admin and two employees, Globex has only an admin.
    Only ids and names are exposed so tests never touch expired ORM state.
    """
    acme, alice = await company_service.register_company(
        db,
        name="Acme",
        email="office@acme.test",
        admin_name="Alice Admin",
        admin_email="alice@acme.test",
        password=PASSWORD,
    )
    bob = await user_service.create_user(
        db, name="Bob Employee", email="bob@acme.test", password=PASSWORD, company_id=acme.id
    )
    carol = await user_service.create_user(
        db, name="Carol Employee", email="carol@acme.test", password=PASSWORD, company_id=acme.id
    )
    globex, zed = await company_service.register_company(
        db,
        name="Globex",
        email="office@globex.test",
        admin_name="Zed Admin",
        admin_email="zed@globex.test",
        password=PASSWORD,
    )
    return SimpleNamespace(
        company_id=acme.id,
        admin_id=alice.id,
        employee_id=bob.id,
        other_employee_id=carol.id,
        other_company_id=globex.id,
        other_admin_id=zed.id,
    )


def auth_headers(user_id: int, company_id: int, role: str) -> Dict[str, str]:
    token = create_access_token(user_id, company_id, role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(tenant):
    return auth_headers(tenant.admin_id, tenant.company_id, "ADMIN")


@pytest.fixture
def employee_headers(tenant):
    return auth_headers(tenant.employee_id, tenant.company_id, "EMPLOYEE")


@pytest.fixture
def other_employee_headers(tenant):
    return auth_headers(tenant.other_employee_id, tenant.company_id, "EMPLOYEE")


@pytest.fixture
def other_admin_headers(tenant):
    return auth_headers(tenant.other_admin_id, tenant.other_company_id, "ADMIN")


@pytest.fixture
def fake_ollama():
    return FakeOllamaClient()


@pytest_asyncio.fixture
async def client(session_factory, fake_ollama):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ollama_client] = lambda: fake_ollama

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def failing_ollama(fake_ollama):
    fake_ollama.error = AIServiceException("Model server returned HTTP 500")
    return fake_ollama
