import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from .api import admin as admin_api
from .api import auth as auth_api
from .api import candidate as candidate_api
from .config import FRONTEND_ORIGINS
from .database import init_db
from .utils.error_handlers import AppError, StorageCorruptionError, create_error_response, get_error_message

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTPException with user-friendly messages."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "status_code": exc.status_code,
            },
        )

    @app.exception_handler(StorageCorruptionError)
    async def storage_corruption_handler(request: Request, exc: StorageCorruptionError):
        logger.exception("Corrupt stored data: %s", exc.message)
        return create_error_response(exc.status_code, get_error_message("storage_error"), exc.details)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("AppError %s: %s", type(exc).__name__, exc.message)
        return create_error_response(exc.status_code, exc.message, exc.details or None)

    @app.exception_handler(OperationalError)
    async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
        """Handle database operational errors."""
        logger.exception("Database OperationalError: %s", exc)
        return create_error_response(503, get_error_message("database_error"))

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle general database errors."""
        logger.exception("Database SQLAlchemyError: %s", exc)
        return create_error_response(500, get_error_message("database_error"))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle ValueError with user-friendly message."""
        logger.warning("ValueError: %s", exc)
        return create_error_response(400, str(exc) or get_error_message("validation_error"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors globally."""
        logger.exception("Unhandled exception: %s", exc)
        return create_error_response(500, get_error_message("server_error"))


def include_routers(app: FastAPI) -> None:
    app.include_router(auth_api.router)
    app.include_router(candidate_api.router)
    app.include_router(admin_api.router)


app = FastAPI(title="HR Nexus Recruitment Portal")

include_routers(app)
register_exception_handlers(app)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "Backend running",
        "service": "HR Nexus Recruitment Portal"
    }


_default_origins = ["http://localhost:5173", "http://127.0.0.1:5173"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=[*_default_origins, *FRONTEND_ORIGINS],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    logger.info("Key-value store ready")
