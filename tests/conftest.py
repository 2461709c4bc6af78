"""
Pytest fixtures for the KitFlow test suite.

Provides:
- An in-memory SQLite database per test (aiosqlite, single shared connection)
- Users and bearer headers for admin and non-admin callers
- An httpx client bound to the FastAPI app, with the database and the
  email/storage collaborators replaced by test doubles
"""
import os

# Settings are read at import time; configure before importing kitflow
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["SEED_DEFAULT_PROGRAMS"] = "false"

import json
import re
from typing import List

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from kitflow.api.deps import get_email_service, get_storage
from kitflow.core.security import create_access_token
from kitflow.database import Base, get_db
from kitflow.main import app
from kitflow.models.client import Client, ClientType
from kitflow.models.kit import Kit, derive_kit_status
from kitflow.models.user import User, UserRole
from kitflow.services.email_service import EmailService
import kitflow.models  # noqa: F401


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncSession:
    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with factory() as session:
        yield session


# =============================================================================
# Records
# =============================================================================

@pytest.fixture
def make_kit(db):
    async def _make_kit(name="Solar Car Kit", type="cstem", stock_count=10, **kwargs) -> Kit:
        kit = Kit(
            name=name,
            type=type,
            stock_count=stock_count,
            status=derive_kit_status(stock_count),
            **kwargs,
        )
        db.add(kit)
        await db.commit()
        return kit
    return _make_kit


@pytest.fixture
def make_client(db):
    async def _make_client(name="Green Valley School", type=ClientType.MONTHLY) -> Client:
        client = Client(
            name=name,
            organization=f"{name} Trust",
            contact="+91 98000 00000",
            type=type.value,
        )
        db.add(client)
        await db.commit()
        return client
    return _make_client


@pytest.fixture
async def admin_user(db) -> User:
    user = User(email="admin@example.com", name="Admin", role=UserRole.ADMIN.value)
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def member_user(db) -> User:
    user = User(email="member@example.com", name="Member", role=UserRole.MEMBER.value)
    db.add(user)
    await db.commit()
    return user


def _bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return _bearer(admin_user)


@pytest.fixture
def member_headers(member_user) -> dict:
    return _bearer(member_user)


# =============================================================================
# Collaborator doubles
# =============================================================================

class SentEmails:
    """Records requests made to the Resend API."""

    def __init__(self):
        self.requests: List[dict] = []
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.status_code >= 300:
            return httpx.Response(self.status_code, json={"message": "rejected"})
        return httpx.Response(200, json={"id": f"email-{len(self.requests)}"})

    def last_code(self) -> str:
        html = self.requests[-1]["html"]
        return re.search(r'class="code-box">(\d{6})<', html).group(1)


@pytest.fixture
def sent_emails() -> SentEmails:
    return SentEmails()


@pytest.fixture
def email_service(sent_emails) -> EmailService:
    return EmailService(
        api_key="re_test",
        from_email="KitFlow <test@example.com>",
        transport=httpx.MockTransport(sent_emails.handler),
    )


class FakeStorage:
    """Stands in for StorageClient."""

    def __init__(self):
        self.objects = {"laser/existing": b"svg"}
        self.deleted: List[str] = []

    def generate_upload_url(self, folder: str = "uploads"):
        storage_id = f"{folder}/{len(self.objects)}"
        self.objects[storage_id] = b""
        return f"https://storage.test/upload/{storage_id}?token=abc", storage_id

    def get_url(self, storage_id: str):
        if storage_id not in self.objects:
            return None
        return f"https://storage.test/object/{storage_id}"

    def delete(self, storage_id: str) -> bool:
        self.deleted.append(storage_id)
        self.objects.pop(storage_id, None)
        return True


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


# =============================================================================
# HTTP client
# =============================================================================

@pytest.fixture
async def client(db, email_service, storage):
    # A failing request rolls back the shared session and expires loaded
    # records; tests read ids before making such requests.
    async def override_get_db():
        try:
            yield db
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_storage] = lambda: storage

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
