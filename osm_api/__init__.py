# osm_api/__init__.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import create_pool, init_db
from .errors import register_error_handlers
from .routes import routers
from .services.password_reset import purge_expired_tokens

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.pool = await create_pool(settings)
    if settings.create_schema:
        await init_db(app.state.pool)

    async with app.state.pool.acquire() as conn:
        await purge_expired_tokens(conn)

    logger.info(f"{settings.app_name} started")
    yield
    await app.state.pool.close()
    logger.info(f"{settings.app_name} stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Customers, mechanics and service requests",
        version=settings.app_version,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # Include all routers
    for router in routers:
        app.include_router(router)

    @app.get("/")
    def health_check():
        return {"status": "healthy", "version": app.version}

    return app
