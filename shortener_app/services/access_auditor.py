"""
Access auditing.

Public guarantee: the success of a primary operation is independent of the
success of its audit write. The event is written inside the caller's
transaction but under its own SAVEPOINT, so a failed audit insert is rolled
back alone, logged, and never raised.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shortener_app.models import AccessMeta, MetaType, ShortURL
from shortener_app.schemas.request_meta import RequestMeta

logger = logging.getLogger(__name__)


class AccessAuditor:
    """Writes one AccessMeta row per create or resolve"""

    def record(
        self,
        session: Session,
        meta_type: MetaType,
        short_code: str,
        meta: RequestMeta,
        short_code_id: Optional[int] = None,
        resolved: bool = False,
    ) -> bool:
        """
        Append an access event.

        Args:
            session: The store session, inside the operation's transaction
            meta_type: CREATE or ACCESS
            short_code: Code the operation was about
            meta: Client address and serialized headers
            short_code_id: Mapping row id, when the caller already has it
            resolved: Look up the active row id when short_code_id is not given

        Returns:
            True if the event was written, False if the write failed
        """
        if short_code_id is None and resolved:
            short_code_id = self._resolve_id(session, short_code)

        event = AccessMeta(
            meta_type=meta_type,
            short_code=short_code,
            short_code_id=short_code_id,
            address=meta.address,
            header=meta.header,
        )
        try:
            with session.begin_nested():
                session.add(event)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to record %s event for '%s': %s",
                meta_type.description, short_code, e,
            )
            return False
        return True

    def _resolve_id(self, session: Session, short_code: str) -> Optional[int]:
        """Best effort: a failed lookup degrades to an event without an id"""
        try:
            with session.begin_nested():
                return session.execute(
                    select(ShortURL.id).where(
                        ShortURL.short_code == short_code,
                        ShortURL.active.is_(True),
                    )
                ).scalar_one()
        except SQLAlchemyError as e:
            logger.error("Could not resolve id for '%s': %s", short_code, e)
            return None
