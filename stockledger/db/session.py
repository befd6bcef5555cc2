from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import sessionmaker

from stockledger.core.config import settings


def configure_sqlite(engine: Engine, *, busy_timeout_ms: int) -> None:
    """Make every SQLite transaction take the write lock up front.

    pysqlite's implicit BEGIN is disabled and replaced with BEGIN IMMEDIATE, so
    two writers can never interleave the read-modify-write of a stock row.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _):
        dbapi_conn.isolation_level = None
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")
        finally:
            cur.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


database_url = settings.resolved_database_url

engine_kwargs: dict[str, object] = {
    # Detect and recover from stale pooled connections.
    "pool_pre_ping": True,
}

if database_url.lower().startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    # Tune SQLAlchemy pool for networked databases (e.g., Postgres).
    engine_kwargs.update(
        {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_timeout": settings.db_pool_timeout_seconds,
            "pool_recycle": settings.db_pool_recycle_seconds,
        }
    )

engine = create_engine(database_url, **engine_kwargs)

if engine.dialect.name == "sqlite":
    configure_sqlite(engine, busy_timeout_ms=settings.sqlite_busy_timeout_ms)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
