from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from shortener_app.config import Settings
from shortener_app.schemas.request_meta import RequestMeta
from shortener_app.services.store import URLStore
from shortener_app.dependencies import get_request_meta, get_settings, get_store

router = APIRouter(tags=["redirect"])


@router.get("/{short_code}")
def redirect_to_long_url(
    short_code: str,
    store: URLStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Redirect to the URL registered for short_code.

    Flow:
    1. Resolve through the store (records an Access event, hit or miss)
    2. Hit: redirect with 301, or 302 when SHORTURL_USE_302 is set
    3. Miss: redirect to the configured fallback URL, else 404
    """
    long_url = store.resolve(short_code, meta)

    if long_url is None:
        long_url = settings.address_to_redirect_if_not_found

    if long_url is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short URL not found or inactive",
        )

    return RedirectResponse(url=long_url, status_code=settings.redirect_status_code)
