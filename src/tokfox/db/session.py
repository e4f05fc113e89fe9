"""Database client with an explicit lifecycle.

``Database`` owns the async engine and session factory. It is constructed
from settings (or a URL), opened once at startup and closed at shutdown by
whoever owns it: the API lifespan in production, a fixture in tests.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from tokfox.core.config import Settings
from tokfox.core.errors import storage_errors

logger = logging.getLogger(__name__)

convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}
metadata = MetaData(naming_convention=convention)

class Base(DeclarativeBase):
    metadata = metadata


class Database:
    def __init__(self, url: str, *, echo: bool = False, create_all: bool = False):
        self.url = url
        self.echo = echo
        self.create_all = create_all
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url_async, echo=settings.db_echo, create_all=settings.db_create_all)

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.url, echo=self.echo)
        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False, class_=AsyncSession)
        logger.info("Database opened", extra={"dialect": self._engine.dialect.name})
        if self.create_all:
            # Model modules register their tables on Base.metadata when imported.
            import tokfox.models  # noqa: F401
            try:
                with storage_errors():
                    async with self._engine.begin() as conn:
                        await conn.run_sync(Base.metadata.create_all)
            except Exception:
                # Leave the client closed so a later open() starts over.
                await self.close()
                raise

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open")
        async with self._sessionmaker() as session:
            yield session

    async def ping(self) -> bool:
        """Lightweight connectivity check (``SELECT 1``)."""
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.warning("Database ping failed: %s", exc)
            return False

    async def __aenter__(self) -> "Database":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
