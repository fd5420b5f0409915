from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from shortener_app.schemas.request_meta import RequestMeta
from shortener_app.schemas.url import AccessLogEntry, RemoveResult, URLCreate, URLMapping
from shortener_app.services.store import URLStore
from shortener_app.exceptions import ShortCodeConflictError
from shortener_app.dependencies import get_request_meta, get_store, require_api_key

# Sync handlers: FastAPI runs them in its threadpool, and the store lock
# serializes them with the redirect service.
router = APIRouter(
    prefix="/v1",
    tags=["urls"],
    dependencies=[Depends(require_api_key)],
)


@router.post(
    "/url/{short_code}",
    response_model=URLMapping,
    status_code=status.HTTP_201_CREATED,
)
def create_short_url(
    short_code: str,
    url_data: URLCreate,
    store: URLStore = Depends(get_store),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Register a short code for a URL"""
    try:
        return store.insert(short_code, url_data.url, meta)
    except ShortCodeConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.delete("/url/{short_code}", response_model=RemoveResult)
def delete_short_url(
    short_code: str,
    store: URLStore = Depends(get_store),
):
    """Soft delete a short code"""
    removed = store.remove(short_code)
    if removed == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Short code '{short_code}' does not exist",
        )
    return RemoveResult(removed=removed)


@router.get("/urls", response_model=List[URLMapping])
def list_short_urls(store: URLStore = Depends(get_store)):
    """All active mappings"""
    return store.list_active()


@router.get("/logs", response_model=List[AccessLogEntry])
def get_access_logs(store: URLStore = Depends(get_store)):
    """Access count and last access per short code"""
    return store.access_logs()
