from contextlib import asynccontextmanager
from typing import Optional
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

# Load environment variables as early as possible
load_dotenv()

from .config import Settings, settings as default_settings
from .database import make_engine, create_db_and_tables
from .exceptions import MarketplaceError, http_exception_handler, marketplace_exception_handler
from .infrastructure.storage.local_image_store import LocalImageStore
from .middleware import LoggingMiddleware, ErrorHandlingMiddleware
from .routers import items_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL),
    format=default_settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Build the API around an explicitly owned engine and image store."""
    settings = settings or default_settings
    engine = engine or make_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    image_store = LocalImageStore(
        settings.IMAGE_DIR,
        default_image=settings.DEFAULT_IMAGE,
        allowed_suffixes=settings.ALLOWED_IMAGE_SUFFIXES,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Starting {settings.APP_NAME}...")
        try:
            create_db_and_tables(engine)
            image_store.ensure_default_image()
        except MarketplaceError:
            logger.exception("Startup initialization failed")
            raise
        yield
        # Shutdown
        logger.info(f"Shutting down {settings.APP_NAME}...")
        engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.image_store = image_store

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(MarketplaceError, marketplace_exception_handler)

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(items_router.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "marketplace.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
    )
