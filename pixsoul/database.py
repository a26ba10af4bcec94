import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.pool import NullPool

from pixsoul.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the async engine and the session factory for one application."""

    def __init__(self, settings: Settings):
        url = settings.sqlalchemy_database_url
        masked_url = url
        password = settings.db_password.get_secret_value()
        if password:
            masked_url = url.replace(password, "*****")
        logger.info(f"SQLAlchemy DB URL: {masked_url}")

        if url.startswith("sqlite"):
            # SQLite connections are cheap and must not be shared across loops
            self.engine: AsyncEngine = create_async_engine(url, poolclass=NullPool)
        else:
            self.engine = create_async_engine(
                url,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=True,
            )
        self.session_factory = async_sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine,
            class_=AsyncSession, expire_on_commit=False,
        )

    async def create_all(self):
        # Importing the models registers their tables on Base.metadata
        from pixsoul import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self):
        await self.engine.dispose()
