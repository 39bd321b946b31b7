from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging
import sys

import httpx
import uvicorn

from domain_switcher.config import settings
from domain_switcher.models.config import AppConfig, load_config
from domain_switcher.services import (
    AssetService,
    ConfigStore,
    DomainProbe,
    FailoverService,
    SessionNotifier,
)
from domain_switcher.storage import BlobStore, FileBlobStore
from domain_switcher.routers import (
    health_router,
    control_router,
    assets_router,
)

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_state(app: FastAPI, config: AppConfig, client: httpx.AsyncClient, store: BlobStore) -> None:
    app.state.config = config
    app.state.client = client
    app.state.store = store
    app.state.notifier = SessionNotifier()
    app.state.config_store = ConfigStore(client, store, config.config_url)
    app.state.probe = DomainProbe(
        client,
        scheme=config.probe_scheme,
        path=config.probe_path,
        timeout=config.probe_timeout,
    )
    app.state.failover_service = FailoverService(
        app.state.config_store,
        app.state.probe,
        app.state.notifier,
    )
    app.state.asset_service = AssetService(client, store, config.asset_origin, config.config_path)


def create_app(
    config: Optional[AppConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
    store: Optional[BlobStore] = None,
    install_assets: bool = True,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting domain switcher...")
        app_config = config or load_config(settings.config_file)
        http_client = client or httpx.AsyncClient(timeout=app_config.probe_timeout)
        blob_store = store or FileBlobStore(app_config.cache_dir, app_config.cache_name)
        build_state(app, app_config, http_client, blob_store)

        try:
            if install_assets:
                await app.state.asset_service.install(app_config.static_assets)
                await app.state.asset_service.activate()
        except Exception as e:
            logger.error(f"Error preparing asset cache: {e}", exc_info=True)

        yield

        logger.info("Shutting down domain switcher...")
        await app.state.notifier.close()
        await app.state.asset_service.aclose()
        if client is None:
            await http_client.aclose()
        logger.info("Shutdown complete")

    app = FastAPI(title="Domain Switcher API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(control_router)
    # catch-all, must stay last
    app.include_router(assets_router)
    return app


app = create_app()


if __name__ == "__main__":
    if len(sys.argv) > 1:
        settings.config_file = sys.argv[1]
    logger.info(f"Starting uvicorn server on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, reload=False)
