from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import PasteSettings
from .http import get_pages_router, get_router, install_error_handlers
from .observability import RequestContextMiddleware
from .reaper import ExpiryReaper
from .store import InMemoryPasteStore, PasteStore

APP_NAME = "zk-paste"
APP_VERSION = "0.1.0"


def create_app(
    settings: Optional[PasteSettings] = None,
    store: Optional[PasteStore] = None,
    run_reaper: bool = True,
) -> FastAPI:
    if settings is None:
        settings = PasteSettings()
    # an empty store is falsy, so test identity rather than truth
    if store is None:
        store = InMemoryPasteStore.from_settings(settings)
    reaper = ExpiryReaper(store, interval_seconds=settings.PASTE_CLEANUP_INTERVAL_SECONDS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_reaper:
            reaper.start()
        try:
            yield
        finally:
            if run_reaper:
                await reaper.stop()

    app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.reaper = reaper
    app.add_middleware(RequestContextMiddleware)
    install_error_handlers(app)

    # Routers
    app.include_router(get_router(store))
    app.include_router(get_pages_router(settings.PASTE_WEB_DIR))

    return app
