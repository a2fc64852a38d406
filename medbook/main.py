from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from datetime import datetime
import logging

# Load environment variables as early as possible
load_dotenv()

from .config import settings
from .database import create_db_and_tables
from .exceptions import SchedulingError, http_exception_handler, scheduling_exception_handler
from .infrastructure.notifications.background_notifier import BackgroundNotifier
from .infrastructure.notifications.factory import get_notifier
from .middleware import RateLimitMiddleware, SecurityMiddleware, LoggingMiddleware, ErrorHandlingMiddleware
from .routers import admin_router, appointments_router, doctors_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.db_init_ok = True
    app.state.db_init_error = None
    try:
        create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Do not crash the app; report via health endpoint
        app.state.db_init_ok = False
        app.state.db_init_error = str(e)
        logger.exception("Database initialization failed")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    notifier = get_notifier()
    if isinstance(notifier, BackgroundNotifier):
        notifier.shutdown()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
    )

    # Add custom exception handlers
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SchedulingError, scheduling_exception_handler)

    # Add middleware
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.allowed_methods_list,
        allow_headers=settings.allowed_headers_list,
    )

    app.include_router(doctors_router.router)
    app.include_router(appointments_router.router)
    app.include_router(admin_router.router)

    if settings.HEALTH_CHECK_ENABLED:
        @app.get("/health")
        def health():
            return {
                "status": "ok" if app.state.db_init_ok else "degraded",
                "database": {"ok": app.state.db_init_ok, "error": app.state.db_init_error},
                "version": settings.APP_VERSION,
                "timestamp": datetime.utcnow().isoformat(),
            }

    # Defaults until lifespan runs
    app.state.db_init_ok = True
    app.state.db_init_error = None
    return app


app = create_app()


# ------------------------
# Run with correct PORT in local/production
# ------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "medbook.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower()
    )
