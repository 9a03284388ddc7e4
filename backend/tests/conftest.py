"""Shared fixtures: in-memory database, authenticated HTTP client and a stub AI service."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from vizboard.core.security import create_access_token
from vizboard.db.database import get_db, init_db, make_session_factory
from vizboard.main import app
from vizboard.models import DataSource, User
from vizboard.schemas.ai import DataAnalysis, NLQWidgetSpec
from vizboard.services.ai_service import get_ai_service

SALES_ROWS = [{"month": "Jan", "sales": 100}, {"month": "Feb", "sales": 150}]


class StubAIService:
    """Deterministic stand-in for the LangChain-backed AIService."""

    def __init__(self) -> None:
        self.calls = []

    async def analyze_data_source(self, name, rows):
        self.calls.append(("analyze", name, len(rows)))
        return DataAnalysis(
            title=f"Analysis of {name}",
            summary=f"{len(rows)} rows of sales data.",
            insights=["Sales grow month over month"],
            suggested_charts=["bar", "line"],
            data_quality=[],
        )

    async def answer_question(self, question, rows):
        self.calls.append(("nlq", question, len(rows)))
        return NLQWidgetSpec(type="bar", title="Sales by month", x_axis="month", y_axis="sales", explanation="Compares months.")

    async def generate_widget_insight(self, title, chart_type, rows):
        self.calls.append(("insight", title, len(rows)))
        return f"{title} covers {len(rows)} rows"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def add(session_factory):
    """Persist ORM objects in their own session and return them."""

    async def _add(*objects):
        async with session_factory() as session:
            session.add_all(objects)
            await session.commit()
            for obj in objects:
                await session.refresh(obj)
        return objects[0] if len(objects) == 1 else objects

    return _add


@pytest.fixture
async def user(add):
    return await add(User(id=1, username="ada", email="ada@example.com"))


@pytest.fixture
async def other_user(add):
    return await add(User(id=2, username="grace", email="grace@example.com"))


@pytest.fixture
async def sales_source(add, user):
    return await add(DataSource(
        user_id=user.id,
        name="sales.csv",
        type="file",
        file_type="csv",
        raw_data=SALES_ROWS,
        metadata_json={"rows": 2, "columns": 2, "columnNames": ["month", "sales"]},
        status="ready",
    ))


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user_id)})}"}


@pytest.fixture
def ai_stub():
    return StubAIService()


@pytest.fixture
async def client(session_factory, ai_stub, user):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = lambda: ai_stub
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=auth_headers(user.id),
    ) as http:
        yield http
    app.dependency_overrides.clear()
