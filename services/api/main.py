from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from loguru import logger

from core.exceptions import ObjectsError
from core.logging_config import setup_logging
from core.objects.repository import MongoObjectRepository
from core.objects.service import ObjectService
from core.settings import Settings, get_settings
from core.storage.factory import build_blob_store
from services.api.exception_handlers import (
    objects_exception_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from services.api.routes import router as objects_router


def build_service(settings: Settings) -> tuple[ObjectService, MongoObjectRepository]:
    records = MongoObjectRepository.from_settings(settings.database)
    records.ensure_indexes()
    blobs = build_blob_store(settings.storage)
    return ObjectService(records, blobs), records


def create_app(service: ObjectService | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the API.

    When ``service`` is given it is used as-is; otherwise one is wired from
    ``settings`` (or the environment) on startup.
    """
    if service is None and settings is None:
        settings = get_settings()

    if settings is not None:
        setup_logging(
            level=settings.logging.level,
            json_format=settings.logging.json_format,
            log_file=settings.logging.file,
        )

    app = FastAPI(
        title="Objects API",
        version="0.1.0",
        description="Create, list, fetch and delete objects with an uploaded image",
        docs_url="/api",
    )
    app.state.object_service = service
    app.state.records = None

    @app.on_event("startup")
    async def _startup() -> None:
        if app.state.object_service is not None or settings is None:
            return
        app.state.object_service, app.state.records = build_service(settings)
        logger.info(
            "API initialised with database={database} collection={collection} storage={backend}",
            database=settings.database.database_name,
            collection=settings.database.collection,
            backend=settings.storage.backend,
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        if app.state.records is not None:
            app.state.records.close()

    @app.get("/healthz", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.add_exception_handler(ObjectsError, objects_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(objects_router)

    if settings is not None and settings.storage.backend == "local":
        app.mount("/files", StaticFiles(directory=settings.storage.local_root, check_dir=False), name="files")

    return app


app = create_app()


__all__ = ["app", "create_app", "build_service"]
