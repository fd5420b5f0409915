import asyncio
import logging
from typing import List, Optional, Tuple

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shortener_app.config import Settings
from shortener_app.database.bootstrap import bootstrap_schema
from shortener_app.database.connection import create_db_engine
from shortener_app.exceptions import PersistenceError, SchemaBootstrapError
from shortener_app.logging_config import setup_logging
from shortener_app.services.store import URLStore
from shortener_app.api.v1 import urls, redirect

logger = logging.getLogger("shortener_app.main")


async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("Persistence failure at %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _create_app(store: URLStore, settings: Settings, title: str, **kwargs) -> FastAPI:
    app = FastAPI(title=title, version=settings.app_version, debug=settings.debug, **kwargs)
    app.state.store = store
    app.state.settings = settings
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    return app


def create_api_app(store: URLStore, settings: Settings) -> FastAPI:
    """Management API: create, delete and list short URLs, access logs"""
    app = _create_app(store, settings, f"{settings.app_name} API")

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    app.include_router(urls.router)
    return app


def create_service_app(store: URLStore, settings: Settings) -> FastAPI:
    """
    Public redirect service, no authentication.

    Every path segment is a short code, so this app has no other routes:
    no health check and no docs/openapi endpoints.
    """
    app = _create_app(
        store,
        settings,
        settings.app_name,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(redirect.router)
    return app


async def _serve(apps: List[Tuple[FastAPI, int]], settings: Settings) -> None:
    servers = [
        uvicorn.Server(
            uvicorn.Config(
                app,
                host=settings.host,
                port=port,
                log_level=settings.log_level.lower(),
            )
        )
        for app, port in apps
    ]
    tasks = [asyncio.create_task(server.serve()) for server in servers]

    # When one listener stops, stop the other as well
    await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for server in servers:
        server.should_exit = True
    await asyncio.gather(*tasks)


def run(settings: Optional[Settings] = None) -> None:
    """
    Start the shortener.

    1. Create/validate the schema (fatal on failure)
    2. Make sure the admin uid has an API key and log it
    3. Serve the API and the redirect service until either stops
    """
    settings = settings or Settings()
    setup_logging(settings.log_level)

    engine = create_db_engine(settings.database_url, echo=settings.debug)
    try:
        bootstrap_schema(engine)
    except SchemaBootstrapError as e:
        logger.critical("Refusing to start: %s", e)
        raise SystemExit(1)

    store = URLStore(engine, api_key_length=settings.api_key_length)
    for api_key in store.ensure_api_key(settings.admin_uid):
        logger.warning("> api key: %s", api_key)

    logger.info(
        "Redirect service on %s:%s, API on %s:%s",
        settings.host, settings.service_port, settings.host, settings.api_port,
    )
    try:
        asyncio.run(
            _serve(
                [
                    (create_service_app(store, settings), settings.service_port),
                    (create_api_app(store, settings), settings.api_port),
                ],
                settings,
            )
        )
    finally:
        store.close()
        engine.dispose()


if __name__ == "__main__":
    run()
