"""Service entry point: builds the FastAPI app and wires the engine to the live feed."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.router import api_router, websocket_router
from .api.websockets.events import manager as feed
from .config import PurpleSimConfig
from .dependencies import get_app_config, get_event_bus, get_simulation_engine, reset_singletons
from .middleware.error_handler import register_error_handlers
from .middleware.request_id import RequestIDMiddleware
from .utils.logging import get_logger, setup_logging

logger = get_logger("main")


def _configure_logging(config: PurpleSimConfig) -> None:
    setup_logging(
        debug=config.debug,
        log_dir=config.log_dir,
        log_max_bytes=config.log_max_bytes,
        log_backup_count=config.log_backup_count,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_app_config()
    bus = get_event_bus()
    bus.subscribe("*", feed.publish)
    await bus.start()

    engine = get_simulation_engine()
    engine.initialize(seed=config.simulation_seed)
    logger.info("service_ready", host=config.host, port=config.port, simulation_id=engine.get_state().id)
    try:
        yield
    finally:
        engine.stop()
        await feed.close_all()
        bus.unsubscribe("*", feed.publish)
        await bus.stop()
        reset_singletons()
        logger.info("service_stopped")


def create_app(config: PurpleSimConfig) -> FastAPI:
    _configure_logging(config)

    application = FastAPI(
        title="PurpleSim",
        description="Purple team exercise simulation: live attack chains, blue team responses and reports",
        version=__version__,
        lifespan=lifespan,
    )
    register_error_handlers(application)

    origins = [o.strip() for o in config.cors_origins.split(",") if o.strip()]
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )
    # Added last, so it wraps CORS
    application.add_middleware(RequestIDMiddleware)

    application.include_router(api_router)
    application.include_router(websocket_router)

    @application.get("/")
    async def root():
        return {"name": config.app_name, "version": __version__, "status": "operational"}

    @application.get("/health")
    async def health(engine=Depends(get_simulation_engine)):
        return {
            "status": "healthy",
            "version": __version__,
            "simulation": engine.get_stats(),
            "event_bus": get_event_bus().get_stats(),
            "websocket": feed.get_stats(),
        }

    return application


app = create_app(get_app_config())


def main():
    config = get_app_config()
    uvicorn.run(
        "purplesim.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()
