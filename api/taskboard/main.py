import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from taskboard import __version__
from taskboard.core.auth import TokenService
from taskboard.core.config import APP_NAME, Settings, get_settings
from taskboard.core.database import init_db, make_engine
from taskboard.core.errors import install_error_handlers
from taskboard.routers.auth import router as auth_router
from taskboard.routers.boards import router as boards_router
from taskboard.routers.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.engine.dispose()
    logger.info("Connection pool disposed")


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the ASGI app. Raises ConfigError when the secret or database URL is missing."""
    settings = settings or get_settings()
    engine = engine or make_engine(settings.db_url)
    init_db(engine)

    app = FastAPI(title=APP_NAME, version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.tokens = TokenService(settings.jwt_secret, ttl=settings.access_token_expire_seconds)

    # cookies carry the session, so origins must be explicit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(boards_router)
    return app
