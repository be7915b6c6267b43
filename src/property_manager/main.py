import logging
import multiprocessing
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from property_manager.api.api import api_router
from property_manager.api.endpoints import media
from property_manager.core.config import configs
from property_manager.core.exceptions import register_exception_handlers
from property_manager.core.logger import setup_logging
from property_manager.db.database import engine

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {configs.APP_NAME} with {configs.STORAGE_TYPE} storage")
    yield
    logger.info("Shutting down, disposing database engine")
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=configs.APP_NAME,
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=configs.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix=configs.API_V1_STR)

    # Presigned URLs of the local backend point back at this app.
    if configs.STORAGE_TYPE == "local":
        app.include_router(media.router, prefix=configs.MEDIA_URL.rstrip("/"), tags=["Media"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    Instrumentator().instrument(app).expose(app)

    return app


app = create_app()


def run():
    is_prod = configs.ENVIRONMENT == "production"

    run_config = {
        "app": "property_manager.main:app",
        "host": configs.APP_HOST,
        "port": configs.APP_PORT,
        "workers": min(multiprocessing.cpu_count(), 2) if is_prod else 1,
        "backlog": 4096,
        "timeout_keep_alive": 120,
    }

    if is_prod:
        run_config.update({
            "loop": "uvloop",
            "http": "httptools",
            "access_log": True,
            "log_level": "info",
        })
    else:
        run_config["reload"] = True

    uvicorn.run(**run_config)


if __name__ == "__main__":
    run()
