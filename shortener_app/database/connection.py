"""
Database engine and session construction.

The store keeps exactly one connection open for the life of the process,
so every engine built here uses a StaticPool.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the process-wide engine.

    For SQLite this also:
    - allows the connection to be used from the server's worker threads
      (access is serialized by the store lock)
    - turns on foreign key enforcement
    - takes transaction control away from pysqlite so SAVEPOINTs work,
      which the best-effort audit write depends on
    """
    is_sqlite = database_url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args=connect_args,
        poolclass=StaticPool,
    )

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


def create_session(engine: Engine) -> Session:
    """Create the single session owned by the store"""
    factory = sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
    return factory()
