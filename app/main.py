from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A database URL must be configured.
    - CONTENT_DEFAULT_LOCALE / CONTENT_REQUIRED_LOCALES must name supported locales.
    - GOOGLE_TRANSLATE_API_KEY is optional; without it translation sync
      reports a per-locale error instead of calling the provider.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    database_url = os.getenv("DATABASE_URL", "").strip()
    local_database_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    if not database_url and not local_database_url and not cloud_database_url:
        errors.append(
            "No database URL configured. Set DATABASE_URL, LOCAL_DATABASE_URL or CLOUD_DATABASE_URL."
        )

    from app.config import get_locale_settings
    from app.domain.locales import LocaleRegistry

    try:
        LocaleRegistry.from_settings(get_locale_settings())
    except ValueError as exc:
        errors.append(f"Invalid locale configuration: {exc}")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    if not os.getenv("GOOGLE_TRANSLATE_API_KEY", "").strip():
        logging.getLogger(__name__).warning(
            "GOOGLE_TRANSLATE_API_KEY is not set; translation sync requests will fail per locale."
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Every content table registered on Base.metadata must exist in the database.

    Does NOT auto-create tables.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from the database: %s.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))})."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    yield


def create_app(*, validate_env: bool = True, lifespan_checks: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    if validate_env:
        _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Content Admin API",
        version="1.0.0",
        lifespan=_lifespan if lifespan_checks else None,
    )

    from app.api.routers import catalog_router, content_router, imports_router, questions_router

    application.include_router(content_router)
    application.include_router(imports_router)
    application.include_router(questions_router)
    application.include_router(catalog_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
