from sqlalchemy import Column, Integer, String
from shortener_app.database.connection import Base


class APIKey(Base):
    """Opaque bearer secret for a uid. No expiry, no revocation."""
    __tablename__ = "api_keys"

    uid = Column(Integer, primary_key=True, autoincrement=False)
    api_key = Column(String, primary_key=True)
