from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from pulsedesk.core.config import settings
from pulsedesk.logstore import models

DATABASE_URL = settings.DATABASE_URL


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # aiosqlite runs connections on a worker thread
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


async_engine = create_async_engine(DATABASE_URL, echo=False, future=True, **_engine_options(DATABASE_URL))

AsyncSessionLocal = sessionmaker(
    async_engine, expire_on_commit=False, class_=AsyncSession
)

async def get_async_session():
    async with AsyncSessionLocal() as session:
        yield session

async def init_db():
    # Create the conversation_logs table if missing
    async with async_engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)

async def close_db():
    await async_engine.dispose()
