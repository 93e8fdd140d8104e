from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from typing import AsyncGenerator
from sqlalchemy import DateTime, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Dialect
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from sqlalchemy.types import TypeDecorator
from photocontest.config import settings

class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(dt_tz.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetimes on every dialect.
    PostgreSQL keeps timestamptz; SQLite stores naive UTC and gets tzinfo back on load.
    Naive values handed in are taken to be UTC already.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=dt_tz.utc)
        value = value.astimezone(dt_tz.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=dt_tz.utc)
        return value.astimezone(dt_tz.utc)


def _is_sqlite(url: str) -> bool:
    return url.lower().startswith("sqlite")


if _is_sqlite(settings.database_url):
    engine = create_async_engine(
        settings.database_url,
        future=True,
        echo=False,
        poolclass=NullPool,
        connect_args={"timeout": 30.0},  # busy timeout in seconds
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        # hand transaction control to the "begin" hook below
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _sqlite_on_begin(conn):
        # take the write lock up front so concurrent writers queue instead of deadlocking
        conn.exec_driver_sql("BEGIN IMMEDIATE")
else:
    engine = create_async_engine(settings.database_url, future=True, echo=False, pool_pre_ping=True)

SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session


def insert_for(session: AsyncSession):
    """Dialect-specific INSERT construct (both support on_conflict_do_nothing)."""
    if session.bind.dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert
