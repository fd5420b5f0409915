"""
The persistent mapping store.

URLStore is the only owner of the database session. Every public method
takes the store lock for its whole duration, so at most one store
operation is in flight at a time across the API and the redirect service.
Callers never see the session.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shortener_app.database.connection import create_session
from shortener_app.exceptions import PersistenceError
from shortener_app.schemas.request_meta import RequestMeta
from shortener_app.schemas.url import AccessLogEntry, URLMapping
from shortener_app.services.access_auditor import AccessAuditor
from shortener_app.services.analytics import AccessLogAggregator
from shortener_app.services.api_key_service import APIKeyManager, RandomKeyGenerator
from shortener_app.services.url_repository import MappingRepository

logger = logging.getLogger(__name__)


class URLStore:
    """
    Serialized access to mappings, audit trail, analytics and API keys.

    Each operation runs in one transaction: committed on success, rolled
    back on any error. Store errors such as a conflict are re-raised as is;
    driver errors are wrapped in PersistenceError.
    """

    def __init__(self, engine: Engine, api_key_length: int = 30):
        self._session: Session = create_session(engine)
        self._lock = threading.Lock()

        self.auditor = AccessAuditor()
        self.mappings = MappingRepository(self.auditor)
        self.analytics = AccessLogAggregator()
        self.api_keys = APIKeyManager(RandomKeyGenerator(length=api_key_length))

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        with self._lock:
            try:
                yield self._session
                self._session.commit()
            except SQLAlchemyError as e:
                self._session.rollback()
                logger.exception("Store operation '%s' failed", operation)
                raise PersistenceError(f"{operation} failed: {e}") from e
            except Exception:
                # conflicts and anything else: nothing from this op may stay pending
                self._session.rollback()
                raise

    # Mappings

    def insert(self, short_code: str, long_url: str, meta: RequestMeta) -> URLMapping:
        """
        Register a mapping.

        Raises:
            ShortCodeConflictError: the code is already active
            PersistenceError: the database rejected the insert
        """
        with self._transaction("insert") as session:
            url = self.mappings.insert(session, short_code, long_url, meta)
            return URLMapping(short_code=url.short_code, url=url.long_url)

    def resolve(self, short_code: str, meta: RequestMeta) -> Optional[str]:
        """Long URL for an active code, or None. Always audited."""
        with self._transaction("resolve") as session:
            return self.mappings.resolve(session, short_code, meta)

    def remove(self, short_code: str) -> int:
        """Deactivate the code; returns rows affected (0 = nothing to do)"""
        with self._transaction("remove") as session:
            return self.mappings.remove(session, short_code)

    def list_active(self) -> List[URLMapping]:
        with self._transaction("list_active") as session:
            return [
                URLMapping(short_code=url.short_code, url=url.long_url)
                for url in self.mappings.list_active(session)
            ]

    # Analytics

    def access_logs(self) -> List[AccessLogEntry]:
        with self._transaction("access_logs") as session:
            return self.analytics.summarise(session)

    # API keys

    def create_api_key(self, uid: int) -> str:
        with self._transaction("create_api_key") as session:
            return self.api_keys.create(session, uid)

    def has_api_key(self, uid: int) -> bool:
        with self._transaction("has_api_key") as session:
            return self.api_keys.has(session, uid)

    def list_api_keys(self, uid: int) -> List[str]:
        with self._transaction("list_api_keys") as session:
            return self.api_keys.list(session, uid)

    def check_api_key(self, uid: int, api_key: str) -> bool:
        with self._transaction("check_api_key") as session:
            return self.api_keys.check(session, uid, api_key)

    def ensure_api_key(self, uid: int) -> List[str]:
        """
        Issue a first key for uid if it has none, then return all its keys.

        Used at startup: logging the result is the only way the admin key
        reaches an operator.
        """
        with self._transaction("ensure_api_key") as session:
            if not self.api_keys.has(session, uid):
                self.api_keys.create(session, uid)
                logger.info("Created initial API key for uid %s", uid)
            return self.api_keys.list(session, uid)

    def close(self) -> None:
        with self._lock:
            self._session.close()
