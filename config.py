import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    # Database settings
    database_file: str = os.getenv("BOOKS_DB_FILE", "books.db")

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Books API")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    environment: str = os.getenv("ENVIRONMENT", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Feature flags
    # None means "decide from the environment": only test deployments get DELETE /books.
    enable_delete_all: Optional[bool] = (
        _env_flag("ENABLE_DELETE_ALL") if os.getenv("ENABLE_DELETE_ALL") is not None else None
    )

    @property
    def delete_all_enabled(self) -> bool:
        if self.enable_delete_all is not None:
            return self.enable_delete_all
        return self.environment.lower() == "test"


settings = Settings()
