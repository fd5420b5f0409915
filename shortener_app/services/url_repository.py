from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from shortener_app.exceptions import ShortCodeConflictError
from shortener_app.models import MetaType, ShortURL
from shortener_app.schemas.request_meta import RequestMeta
from shortener_app.services.access_auditor import AccessAuditor


class MappingRepository:
    """
    Insert / resolve / soft-delete of short code mappings.

    Works on a session handed in by URLStore, which owns the transaction
    and the lock. Nothing here commits or rolls back the outer transaction.

    Insert and resolve each write exactly one audit event through the
    AccessAuditor; remove writes none.
    """

    def __init__(self, auditor: AccessAuditor):
        self.auditor = auditor

    def _find_active(self, session: Session, short_code: str) -> Optional[ShortURL]:
        return session.execute(
            select(ShortURL).where(
                ShortURL.short_code == short_code,
                ShortURL.active.is_(True),
            )
        ).scalar_one_or_none()

    def insert(
        self,
        session: Session,
        short_code: str,
        long_url: str,
        meta: RequestMeta,
    ) -> ShortURL:
        """
        Register short_code -> long_url.

        The conflict check only looks at active rows, so a code whose
        previous mapping was removed can be registered again.

        Raises:
            ShortCodeConflictError: an active mapping already uses the code.
                Nothing is written, not even an audit event.
        """
        if self._find_active(session, short_code) is not None:
            raise ShortCodeConflictError(short_code)

        url = ShortURL(short_code=short_code, long_url=long_url, active=True)
        session.add(url)
        session.flush()  # assigns url.id

        self.auditor.record(
            session,
            MetaType.CREATE,
            short_code,
            meta,
            short_code_id=url.id,
        )
        return url

    def resolve(
        self,
        session: Session,
        short_code: str,
        meta: RequestMeta,
    ) -> Optional[str]:
        """
        Look up the long URL for an active code.

        Hit or miss, one ACCESS event is recorded. On a hit the auditor
        resolves the row id itself; on a miss the event carries no id.

        Returns:
            The long URL, or None on a miss
        """
        url = self._find_active(session, short_code)
        found = url is not None

        self.auditor.record(
            session,
            MetaType.ACCESS,
            short_code,
            meta,
            resolved=found,
        )
        return url.long_url if found else None

    def remove(self, session: Session, short_code: str) -> int:
        """
        Soft delete every active row with this code.

        Returns:
            Number of rows deactivated; 0 means there was nothing to remove
        """
        result = session.execute(
            update(ShortURL)
            .where(
                ShortURL.short_code == short_code,
                ShortURL.active.is_(True),
            )
            .values(active=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def list_active(self, session: Session) -> List[ShortURL]:
        """All active mappings, oldest first"""
        return list(
            session.execute(
                select(ShortURL)
                .where(ShortURL.active.is_(True))
                .order_by(ShortURL.id)
            ).scalars()
        )
