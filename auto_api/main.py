import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from auto_api.config import settings
from auto_api.database import check_db_connection
from auto_api.utils.exceptions import AppException
from auto_api.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    generic_exception_handler,
)

from auto_api.api.v1 import autos

API_PREFIX = "/api/v1"
VERSION = "1.0.0"

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        description="REST API for autos with their model, pictures and an optional file",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )

    # browsers only see ETag / Location when they are exposed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "Location"],
    )

    _register_exception_handlers(app)
    app.include_router(autos.router, prefix=API_PREFIX, tags=["Autos"])

    @app.on_event("startup")
    def on_startup():
        if check_db_connection():
            logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV}), database reachable")
        else:
            logger.error("Database not reachable at startup")

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": VERSION}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("auto_api.main:app", host=settings.APP_HOST, port=settings.APP_PORT,
                reload=settings.is_development)
