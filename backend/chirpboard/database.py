"""
Chirpboard Backend: Database Lifecycle and Session Management
=============================================================

What:  The `Database` collaborator (engine + session factory), the ORM base
       class, the per-request session dependency and the entity-validation
       hook that runs before every flush.
How:   The app factory builds one `Database`, the lifespan opens it on
       startup and disposes it on shutdown, and `get_db_session` hands each
       request its own AsyncSession taken from `app.state.database`.
Who:   Routes (via Depends), the live channel, Alembic and the tests.

Entity validation at the storage layer:
    A `before_flush` listener calls `validators.ensure_valid()` for every new
    or modified row whose class declares `__entity_name__`. A broken rule
    raises EntityValidationError out of `flush()`/`commit()` and nothing is
    written.
"""

import logging
import secrets
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import Session as OrmSession
from sqlalchemy.pool import StaticPool

from chirpboard.config import Settings
from chirpboard.exceptions import DatabaseError
from chirpboard.validators import OBJECT_ID_LENGTH, ensure_valid

logger = logging.getLogger(__name__)


def new_object_id() -> str:
    """24-character lowercase hex identifier, the width used for every row id."""
    return secrets.token_hex(OBJECT_ID_LENGTH // 2)


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Models set `__entity_name__` to the name used in validation messages
    ("User", "Entry", ...) to opt in to the before-flush validation hook.
    """
    pass


@event.listens_for(OrmSession, "before_flush")
def _validate_pending_rows(session, flush_context, instances) -> None:
    for obj in list(session.new) + list(session.dirty):
        entity = getattr(type(obj), "__entity_name__", None)
        if entity:
            ensure_valid(entity, obj)


class Database:
    """
    Owns the async engine and session factory.

    Lifecycle:
        db = Database.from_settings(settings)
        await db.connect()        # startup
        async with db.session() as session: ...
        await db.dispose()        # shutdown

    SQLite URLs (used by the tests) get a StaticPool so an in-memory database
    is shared by every session of the same Database object.
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
        create_tables: bool = False,
    ):
        self.url = url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_pre_ping = pool_pre_ping
        self.echo = echo
        self.create_tables = create_tables
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
            create_tables=settings.db_create_tables,
        )

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def _engine_options(self) -> dict:
        if make_url(self.url).get_backend_name() == "sqlite":
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        return {
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": self.pool_pre_ping,
            "pool_recycle": 3600,
        }

    async def connect(self) -> None:
        """Create the engine and, if configured, any missing tables."""
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.url, echo=self.echo, **self._engine_options())
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        if self.create_tables:
            # Registers every model with Base.metadata.
            import chirpboard.models  # noqa: F401

            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables ensured")
        logger.info("Database connected (%s)", make_url(self.url).get_backend_name())

    def session(self) -> AsyncSession:
        """New AsyncSession; use as `async with db.session() as s:`."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._session_factory()

    async def ping(self) -> bool:
        """Run SELECT 1; False when the store cannot be reached."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close every pooled connection."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database disposed")


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing one database session per request.

    Write handlers commit themselves before building their response, so a
    failed commit reaches the client. The commit here only covers whatever
    is still pending once the handler returns. Any exception rolls back.
    SQLAlchemy failures are re-raised as DatabaseError (500,
    generic message); application errors propagate unchanged.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Database error: %s", str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__}) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
