from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from shortener_app.database.connection import Base
from shortener_app.models.meta_type import MetaTypeColumn


class AccessMeta(Base):
    """
    Append-only audit row, one per create or resolve.

    short_code is denormalized so misses can be recorded too; short_code_id
    is only set when the mapping row was resolved at write time.
    """
    __tablename__ = "access_meta"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meta_type = Column(MetaTypeColumn, ForeignKey("meta_type.id"), nullable=False)
    short_code = Column(String, nullable=False)
    short_code_id = Column(Integer, ForeignKey("short_urls.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    address = Column(String, nullable=True)
    header = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_access_meta_short_code", "short_code"),
    )
