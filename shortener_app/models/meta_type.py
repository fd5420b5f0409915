"""
Access event types and their storage representation.

Stored as integers that reference the ``meta_type`` lookup table.
"""

from enum import IntEnum

from sqlalchemy import Column, Integer, String
from sqlalchemy.types import TypeDecorator

from shortener_app.database.connection import Base
from shortener_app.exceptions import UnknownMetaTypeError


class MetaType(IntEnum):
    """Kind of operation an access event records"""
    CREATE = 1
    ACCESS = 2

    @property
    def description(self) -> str:
        return self.name.capitalize()

    def to_storage(self) -> int:
        return int(self.value)

    @classmethod
    def from_storage(cls, code) -> "MetaType":
        """Map a stored code back to the enum, rejecting unknown codes"""
        try:
            return cls(int(code))
        except (TypeError, ValueError):
            raise UnknownMetaTypeError(code) from None


class MetaTypeColumn(TypeDecorator):
    """Integer column that only accepts and yields MetaType members"""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return MetaType.from_storage(value).to_storage()

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return MetaType.from_storage(value)


class MetaTypeRow(Base):
    """Static lookup table, seeded once by bootstrap"""
    __tablename__ = "meta_type"

    id = Column(Integer, primary_key=True)
    description = Column(String, nullable=False)
