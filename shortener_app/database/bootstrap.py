"""
Schema bootstrap.

Creates the four tables if absent and seeds the meta type lookup, all in
one transaction. Running it again against an existing database changes
nothing.
"""

import logging

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from shortener_app.database.connection import Base
from shortener_app.exceptions import SchemaBootstrapError
from shortener_app.models import MetaType, MetaTypeRow

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _seed_statement(dialect_name: str):
    rows = [
        {"id": meta_type.to_storage(), "description": meta_type.description}
        for meta_type in MetaType
    ]
    dialect_insert = _UPSERT_INSERTS.get(dialect_name)
    if dialect_insert is None:
        raise SchemaBootstrapError(
            f"Unsupported database dialect for bootstrap: {dialect_name}"
        )
    return (
        dialect_insert(MetaTypeRow)
        .values(rows)
        .on_conflict_do_nothing(index_elements=[MetaTypeRow.id])
    )


def bootstrap_schema(engine: Engine) -> None:
    """
    Create and seed the schema.

    Raises:
        SchemaBootstrapError: on any failing statement. Callers should
            treat this as fatal.
    """
    statement = _seed_statement(engine.dialect.name)
    try:
        with engine.begin() as conn:
            Base.metadata.create_all(conn)
            conn.execute(statement)
    except SQLAlchemyError as e:
        logger.error("Schema bootstrap failed: %s", e)
        raise SchemaBootstrapError(f"Schema bootstrap failed: {e}") from e

    logger.info("Schema ready (%s)", ", ".join(sorted(Base.metadata.tables)))
