from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index, text, true
from sqlalchemy.sql import func
from shortener_app.database.connection import Base


class ShortURL(Base):
    """
    Short code -> long URL mapping.

    Rows are never physically deleted: removal flips ``active`` to False,
    after which the same code may be registered again as a new row.
    At most one active row per short_code.
    """
    __tablename__ = "short_urls"

    id = Column(Integer, primary_key=True, autoincrement=True)
    short_code = Column(String, nullable=False)
    long_url = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    active = Column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        Index("ix_short_urls_short_code", "short_code"),
        # Backs up the store's conflict check; not the primary enforcement point
        Index(
            "uq_short_urls_active_short_code",
            "short_code",
            unique=True,
            sqlite_where=text("active = 1"),
            postgresql_where=text("active"),
        ),
    )
