import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from csv_service.api.routes import convert
from csv_service.core.config import Settings
from csv_service.core.errors import register_exception_handlers
from csv_service.core.logging import configure_logging
from csv_service.services.decoder import CsvDecoder
from csv_service.services.lifecycle import LifecycleManager
from csv_service.services.storage import TempFileStore
from csv_service.services.upload import UploadReceiver

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    store = TempFileStore(settings.upload_dir)
    lifecycle = LifecycleManager(
        store,
        grace_period=settings.shutdown_grace_seconds,
        crash_exit_delay=settings.crash_exit_delay_seconds,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        lifecycle.startup()
        asyncio.get_running_loop().set_exception_handler(lifecycle.handle_async_error)
        yield
        lifecycle.shutdown()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.receiver = UploadReceiver(store, settings)
    app.state.decoder = CsvDecoder(settings)
    app.state.lifecycle = lifecycle

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, settings)
    app.include_router(convert.router)
    return app


class ConverterServer(uvicorn.Server):
    """Servidor uvicorn que purga el almacén en cuanto llega SIGINT/SIGTERM."""

    def __init__(self, config: uvicorn.Config, lifecycle: LifecycleManager):
        super().__init__(config)
        self.lifecycle = lifecycle

    def handle_exit(self, sig, frame) -> None:
        self.lifecycle.begin_shutdown(sig)
        super().handle_exit(sig, frame)


def run() -> None:
    settings = Settings()
    configure_logging(settings.log_level)
    application = create_app(settings)
    lifecycle: LifecycleManager = application.state.lifecycle
    lifecycle.install_hooks()

    config = uvicorn.Config(
        application,
        host=settings.host,
        port=settings.port,
        log_config=None,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )
    logger.info("Server running on port %d", settings.port)
    ConverterServer(config, lifecycle).run()


app = create_app()


if __name__ == "__main__":
    run()
