"""
Database models for URL shortener.

All four relations live in one database file: the mappings, the meta type
lookup, the access audit trail and the API keys. Importing this package
registers every table with Base.metadata.
"""

from .url import ShortURL
from .meta_type import MetaType, MetaTypeRow
from .access_meta import AccessMeta
from .api_key import APIKey

__all__ = ["ShortURL", "MetaType", "MetaTypeRow", "AccessMeta", "APIKey"]
