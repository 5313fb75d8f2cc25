"""Application factory that serves both the API and the static front end."""
from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .api import create_app as create_api_app
from .config import Settings, load_settings, resolve_config_path
from .store import JSONRecordStore, RecordStore

logger = logging.getLogger("dcnexus.application")


def create_application(
    *,
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
) -> FastAPI:
    """Create the combined ASGI application."""

    if settings is None:
        settings = load_settings(resolve_config_path(os.getenv("DCNEXUS_CONFIG"))).with_env_overrides()

    if store is None:
        json_store = JSONRecordStore(settings.users_path)
        json_store.initialize()
        store = json_store

    app = create_api_app(store=store, service_name=settings.service_name)
    app.state.settings = settings

    static_dir = settings.static_dir
    if static_dir is not None and static_dir.is_dir():
        # Mounted last so the API routes take precedence over asset paths.
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")
    elif static_dir is not None:
        logger.info("Static asset directory %s not found; serving the API only", static_dir)

    return app


__all__ = ["create_application"]
