"""
Async engine, session factory and declarative base for the vizboard tables.

Production runs on PostgreSQL through asyncpg; any async SQLAlchemy URL
works, which is how the tests run on aiosqlite.
"""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from vizboard.core.config import settings
from vizboard.core.logger import logger


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    # Loaded rows stay readable after commit; responses are built from them
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


AsyncSessionLocal = make_session_factory(engine)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """One session per request, closed when the response is done."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db(bind: AsyncEngine = None):
    """Create any missing tables on ``bind`` (the application engine by default)."""
    from vizboard.models import user, organization, data_source, dashboard, ai_analysis  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"[DB] Tables ready ({len(Base.metadata.tables)} tables)")
