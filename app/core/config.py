# app/core/config.py
from pydantic_settings import BaseSettings
from typing import List, Optional
from urllib.parse import quote_plus

class Settings(BaseSettings):
    # App settings
    APP_NAME: str = "Users API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # CORS settings
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Database settings for PostgreSQL; DATABASE_URL wins over the DB_* parts
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASSWORD: str = ""
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 10
    DB_COMMAND_TIMEOUT: float = 60

    # SQL text settings
    SQL_ROOT: str = "Sql"
    SQL_PREFER_FILESYSTEM: Optional[bool] = None  # None follows DEBUG
    SQL_CONTENT_ROOT: Optional[str] = "app"  # source folder holding Sql/, relative to the working directory
    SQL_RESOURCE_PACKAGE: Optional[str] = "app"
    SQL_RESOURCE_NAMESPACE: Optional[str] = "app.Sql"
    SQL_WATCH: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

    def get_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if not self.DB_NAME or not self.DB_USER:
            raise RuntimeError(
                "Database connection is not configured. Set DATABASE_URL or DB_NAME and DB_USER."
            )
        encoded_password = quote_plus(self.DB_PASSWORD)
        return f"postgresql://{self.DB_USER}:{encoded_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    def prefer_file_system(self) -> bool:
        """Hot-reload from disk in development unless explicitly overridden"""
        if self.SQL_PREFER_FILESYSTEM is None:
            return self.DEBUG
        return self.SQL_PREFER_FILESYSTEM

settings = Settings()
