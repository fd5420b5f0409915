"""
Access analytics over the audit trail.

Grouping is by code text, not by mapping row: when a code is removed and
registered again, both registrations' accesses land in the same entry.
"""

from typing import List

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from shortener_app.models import AccessMeta, MetaType, ShortURL
from shortener_app.schemas.url import AccessLogEntry


class AccessLogAggregator:
    """Summarises ACCESS events per short code"""

    def _url_for_code(self):
        # Active row first, otherwise the most recent registration.
        # A scalar subquery keeps historical rows from multiplying counts.
        return (
            select(ShortURL.long_url)
            .where(ShortURL.short_code == AccessMeta.short_code)
            .order_by(ShortURL.active.desc(), ShortURL.id.desc())
            .limit(1)
            .correlate(AccessMeta)
            .scalar_subquery()
        )

    def summarise(self, session: Session) -> List[AccessLogEntry]:
        """
        One entry for every code that appears in the audit trail.

        access_count and last_access only consider ACCESS events, so a code
        that was created but never resolved reports 0 and None.
        """
        is_access = AccessMeta.meta_type == MetaType.ACCESS

        stmt = (
            select(
                AccessMeta.short_code.label("code"),
                self._url_for_code().label("url"),
                func.count(case((is_access, 1))).label("access_count"),
                func.max(case((is_access, AccessMeta.created_at))).label("last_access"),
            )
            .group_by(AccessMeta.short_code)
            .order_by(AccessMeta.short_code)
        )

        return [
            AccessLogEntry.model_validate(row)
            for row in session.execute(stmt)
        ]
