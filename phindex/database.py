from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from phindex.config import DATABASE_URL, DB_SCHEMA, SQL_ECHO
from typing import AsyncGenerator


def async_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


engine = create_async_engine(
    async_url(DATABASE_URL),
    echo=SQL_ECHO,
    future=True
)

AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# String foreign keys ("accounts.id") resolve against the same schema
Base = declarative_base(metadata=MetaData(schema=DB_SCHEMA))

# Dependency for FastAPI routes
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
