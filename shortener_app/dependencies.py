"""
FastAPI dependencies for dependency injection.

The store and the settings are created once by the entry point and stored
on ``app.state``; routes get them from here instead of from module globals.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from shortener_app.config import Settings
from shortener_app.schemas.request_meta import RequestMeta
from shortener_app.services.store import URLStore

API_KEY_HEADER = "x-api-key"


def get_store(request: Request) -> URLStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_request_meta(request: Request) -> RequestMeta:
    return RequestMeta.from_request(request)


def require_api_key(
    api_key: Optional[str] = Header(None, alias=API_KEY_HEADER),
    store: URLStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> str:
    """Reject the request unless x-api-key is a key issued to the admin uid"""
    if not api_key or not store.check_api_key(settings.admin_uid, api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid API key",
        )
    return api_key
