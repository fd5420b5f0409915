"""
API key issuance and verification.

Keys are random alphanumeric strings stored in plain form per uid. Every
key ever issued stays valid: there is no expiry and no revocation.
"""

import secrets
import string
from typing import List

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from shortener_app.models import APIKey


class RandomKeyGenerator:
    """Alphanumeric secret of a fixed length"""

    def __init__(self, length: int = 30):
        self.length = length
        self.characters = string.ascii_letters + string.digits

    def generate(self) -> str:
        return "".join(secrets.choice(self.characters) for _ in range(self.length))


class APIKeyManager:
    def __init__(self, generator: RandomKeyGenerator = None):
        self.generator = generator or RandomKeyGenerator()

    def create(self, session: Session, uid: int) -> str:
        """Issue a new key for uid. Existing keys stay valid."""
        api_key = self.generator.generate()
        session.add(APIKey(uid=uid, api_key=api_key))
        session.flush()
        return api_key

    def has(self, session: Session, uid: int) -> bool:
        return session.execute(
            select(exists().where(APIKey.uid == uid))
        ).scalar()

    def list(self, session: Session, uid: int) -> List[str]:
        return session.execute(
            select(APIKey.api_key).where(APIKey.uid == uid)
        ).scalars().all()

    def check(self, session: Session, uid: int, api_key: str) -> bool:
        """True iff this exact (uid, key) pair was issued"""
        return session.execute(
            select(
                exists().where(APIKey.uid == uid, APIKey.api_key == api_key)
            )
        ).scalar()
