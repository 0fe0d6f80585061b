# app/core/dependencies.py
from pathlib import Path
from fastapi import Depends, Request

from app.core.config import Settings
from app.core.database import DatabaseManager, db_manager
from app.core.sql_text import ResourceBundle, SqlTextOptions, SqlTextResolver
from app.repositories.user_repository import UserRepository

# Runtime directory of the application, the counterpart of a build output folder
APP_DIR = Path(__file__).resolve().parents[1]


def create_sql_text_resolver(settings: Settings) -> SqlTextResolver:
    """Build the process-wide SqlTextResolver from settings"""
    content_root = Path(settings.SQL_CONTENT_ROOT).resolve() if settings.SQL_CONTENT_ROOT else Path.cwd()
    bundle = (
        ResourceBundle.from_package(settings.SQL_RESOURCE_PACKAGE)
        if settings.SQL_RESOURCE_PACKAGE
        else None
    )
    options = SqlTextOptions(
        root=settings.SQL_ROOT,
        prefer_file_system=settings.prefer_file_system(),
        resource_bundle=bundle,
        resource_namespace=settings.SQL_RESOURCE_NAMESPACE,
    )
    return SqlTextResolver(
        options,
        dev_path=content_root / settings.SQL_ROOT,
        out_path=APP_DIR / settings.SQL_ROOT,
        watch=settings.SQL_WATCH,
    )


def get_sql_text(request: Request) -> SqlTextResolver:
    return request.app.state.sql_text


def get_database() -> DatabaseManager:
    return db_manager


def get_user_repository(
    sql_text: SqlTextResolver = Depends(get_sql_text),
    db: DatabaseManager = Depends(get_database),
) -> UserRepository:
    return UserRepository(sql_text, db)
