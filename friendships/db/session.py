from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from friendships.core.config import settings


def use_immediate_transactions(engine: AsyncEngine) -> None:
    """Make every SQLite transaction start with BEGIN IMMEDIATE and enforce foreign keys.

    SQLite has no row locks, so the write lock is taken up front and
    read-decide-write sequences run one at a time.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, isolation_level: str | None = None, echo: bool = False) -> AsyncEngine:
    url = url.replace("psycopg2", "asyncpg")
    kwargs = {"echo": echo}
    if url.startswith("sqlite"):
        engine = create_async_engine(url, **kwargs)
        use_immediate_transactions(engine)
        return engine

    if isolation_level:
        kwargs["isolation_level"] = isolation_level
    return create_async_engine(url, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.DB_URL, settings.DB_ISOLATION_LEVEL, settings.DB_ECHO)
SessionLocal = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

async def get_db():
    async with SessionLocal() as session:
        yield session


@asynccontextmanager
async def atomic(db: AsyncSession, isolation_level: str | None = None):
    """Run the block in a fresh transaction; commit on success, roll back on any error.

    A transaction left open by earlier reads on the session (auth, request
    guards) is committed first, so the block does not inherit their snapshot.
    `isolation_level` applies to the new transaction on servers that support
    per-transaction levels; SQLite serializes through BEGIN IMMEDIATE instead.
    """
    if db.in_transaction():
        await db.commit()
    if isolation_level and db.get_bind().dialect.name != "sqlite":
        await db.connection(execution_options={"isolation_level": isolation_level})
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise
