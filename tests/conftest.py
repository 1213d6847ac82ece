"""
Pytest fixtures for Trust Ledger tests.

Every test gets its own SQLite file so API requests, which open their own
sessions, see the rows the fixtures committed.
"""

import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, List, Optional

# Settings are read once and cached; point them at a throwaway database and
# disable the OpenAI key and rate limiting before anything under src/ loads.
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"

from src.config import get_settings  # noqa: E402

get_settings.cache_clear()

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from src.ai.narrative_annotator import NarrativeAnnotator  # noqa: E402
from src.ai.text_generator import GenerationRequest, TextGenerationError  # noqa: E402
from src.api.deps import get_db, get_text_generator  # noqa: E402
from src.database import build_engine  # noqa: E402
from src.kernel.identity.jwt import JWTManager  # noqa: E402
from src.kernel.models import (  # noqa: E402
    Base,
    MemberRole,
    MemberStatus,
    TrustLedgerEntry,
    User,
    UserRole,
    Workspace,
    WorkspaceDocument,
    WorkspaceMember,
    WorkspaceProject,
    WorkspaceTask,
)
from src.main import app  # noqa: E402


def pytest_sessionfinish(session, exitstatus):
    """Clean up the module-level temp DB file after the run."""
    if os.path.exists(TEST_DB_PATH):
        os.unlink(TEST_DB_PATH)


# ---------------------------------------------------------------------------
# Text collaborator fakes
# ---------------------------------------------------------------------------


class FakeTextGenerator:
    """
    Stand-in for TextGenerator.

    ``responder`` maps a request to text; raising from it simulates an API
    failure. Every request is recorded.
    """

    def __init__(self, responder: Callable[[GenerationRequest], str]):
        self.responder = responder
        self.requests: List[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        return self.responder(request)


def _fail(request: GenerationRequest) -> str:
    raise TextGenerationError("OpenAI API key not configured")


@pytest.fixture
def failing_generator() -> FakeTextGenerator:
    """Collaborator that fails every call."""
    return FakeTextGenerator(_fail)


@pytest.fixture
def make_generator() -> Callable[[Callable[[GenerationRequest], str]], FakeTextGenerator]:
    """Factory for collaborators with a custom responder."""
    return FakeTextGenerator


@pytest.fixture
def annotator(failing_generator: FakeTextGenerator) -> NarrativeAnnotator:
    """Annotator that always falls back to deterministic text."""
    return NarrativeAnnotator(failing_generator, concurrency=3)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Engine on a fresh SQLite file with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


async def _user(db_session: AsyncSession, email: str, name: Optional[str], role: UserRole) -> User:
    user = User(id=uuid.uuid4(), email=email, name=name, role=role.value)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def founder(db_session: AsyncSession) -> User:
    return await _user(db_session, "ada@example.com", "Ada Founder", UserRole.FOUNDER)


@pytest_asyncio.fixture
async def mentor(db_session: AsyncSession) -> User:
    return await _user(db_session, "grace@example.com", "Grace Mentor", UserRole.MENTOR)


@pytest_asyncio.fixture
async def outsider(db_session: AsyncSession) -> User:
    """A user with no membership in the test workspace."""
    return await _user(db_session, "mallory@example.com", None, UserRole.INVESTOR)


@pytest_asyncio.fixture
async def workspace(db_session: AsyncSession, founder: User, mentor: User) -> Workspace:
    """Workspace with founder (owner) and mentor as active members."""
    ws = Workspace(id=uuid.uuid4(), name="Acme Launch", owner_id=founder.id)
    db_session.add(ws)
    db_session.add_all([
        WorkspaceMember(
            workspace_id=ws.id,
            user_id=founder.id,
            role=MemberRole.OWNER.value,
            status=MemberStatus.ACTIVE.value,
        ),
        WorkspaceMember(
            workspace_id=ws.id,
            user_id=mentor.id,
            role=MemberRole.MEMBER.value,
            status=MemberStatus.ACTIVE.value,
        ),
    ])
    await db_session.commit()
    return ws


@pytest_asyncio.fixture
async def project(db_session: AsyncSession, workspace: Workspace, founder: User) -> WorkspaceProject:
    proj = WorkspaceProject(
        id=uuid.uuid4(),
        workspace_id=workspace.id,
        name="Mobile App",
        created_by=founder.id,
    )
    db_session.add(proj)
    await db_session.commit()
    return proj


@pytest_asyncio.fixture
async def other_project(db_session: AsyncSession, workspace: Workspace, founder: User) -> WorkspaceProject:
    proj = WorkspaceProject(
        id=uuid.uuid4(),
        workspace_id=workspace.id,
        name="Website",
        created_by=founder.id,
    )
    db_session.add(proj)
    await db_session.commit()
    return proj


def days_ago(days: int, hours: int = 0) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days, hours=hours)


@pytest.fixture
def add_task(db_session: AsyncSession):
    """Factory: add and commit a task."""

    async def _add(
        workspace: Workspace,
        title: str,
        status: str = "todo",
        assigned_to: Optional[uuid.UUID] = None,
        created_by: Optional[uuid.UUID] = None,
        project: Optional[WorkspaceProject] = None,
        updated_at: Optional[datetime] = None,
        priority: Optional[str] = None,
    ) -> WorkspaceTask:
        stamp = updated_at or days_ago(2)
        task = WorkspaceTask(
            id=uuid.uuid4(),
            workspace_id=workspace.id,
            project_id=project.id if project else None,
            title=title,
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            created_by=created_by,
            created_at=stamp,
            updated_at=stamp,
        )
        db_session.add(task)
        await db_session.commit()
        return task

    return _add


@pytest.fixture
def add_document(db_session: AsyncSession):
    """Factory: add and commit a document."""

    async def _add(
        workspace: Workspace,
        title: str,
        status: Optional[str] = None,
        created_by: Optional[uuid.UUID] = None,
        project: Optional[WorkspaceProject] = None,
        doc_type: str = "document",
        updated_at: Optional[datetime] = None,
    ) -> WorkspaceDocument:
        stamp = updated_at or days_ago(2)
        document = WorkspaceDocument(
            id=uuid.uuid4(),
            workspace_id=workspace.id,
            project_id=project.id if project else None,
            title=title,
            doc_type=doc_type,
            status=status,
            created_by=created_by,
            created_at=stamp,
            updated_at=stamp,
        )
        db_session.add(document)
        await db_session.commit()
        return document

    return _add


def make_entry(
    user_id: uuid.UUID,
    trust_points: int,
    action: str = "manual_adjustment",
    action_date: Optional[datetime] = None,
    metadata: Optional[dict] = None,
    description: str = "Adjustment",
    workspace_id: Optional[uuid.UUID] = None,
) -> TrustLedgerEntry:
    """Transient ledger entry for pure-function tests."""
    stamp = action_date or datetime.now(timezone.utc)
    return TrustLedgerEntry(
        id=uuid.uuid4(),
        workspace_id=workspace_id or uuid.uuid4(),
        user_id=user_id,
        action=action,
        description=description,
        trust_points=trust_points,
        action_date=stamp,
        created_at=stamp,
        entry_metadata=metadata,
    )


@pytest.fixture
def entry_factory():
    return make_entry


# ---------------------------------------------------------------------------
# Auth and HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture
def jwt_manager() -> JWTManager:
    """JWT manager sharing the app's secret."""
    return JWTManager(access_token_expire_minutes=30)


@pytest.fixture
def auth_headers_for(jwt_manager: JWTManager) -> Callable[[User], dict]:
    """Factory: bearer headers for a user."""

    def _headers(user: User) -> dict:
        token, _, _ = jwt_manager.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def text_generator(failing_generator: FakeTextGenerator) -> FakeTextGenerator:
    """Collaborator injected into the app; tests override this fixture to script it."""
    return failing_generator


@pytest_asyncio.fixture
async def client(session_maker, text_generator) -> AsyncGenerator[AsyncClient, None]:
    """Async client bound to the test DB and the fake text collaborator."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_text_generator] = lambda: text_generator
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
