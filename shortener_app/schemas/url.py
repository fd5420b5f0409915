from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class URLBase(BaseModel):
    url: str = Field(..., min_length=1, description="The long URL to redirect to")


class URLCreate(URLBase):
    """Body of POST /v1/url/{short_code}"""
    pass


class URLMapping(URLBase):
    """An active short code and the URL it resolves to"""
    short_code: str


class RemoveResult(BaseModel):
    removed: int


class AccessLogEntry(BaseModel):
    """Per-code access summary produced by the analytics aggregator

    url is None when no mapping row carries this code text.
    """
    code: str
    url: Optional[str] = None
    access_count: int
    last_access: Optional[datetime] = None

    # Pydantic V2 style configuration
    model_config = ConfigDict(from_attributes=True)
