from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runtime configuration read from the environment and ``.env``."""

    # Database; DB_URL wins over the MySQL parts when set
    DB_URL: Optional[str] = None
    DB_USER: str = "root"
    DB_PASSWORD: str = "budget"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "budget_tracker"
    DEBUG: bool = False  # echoes SQL

    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Valid budget years
    MIN_YEAR: int = 2020
    MAX_YEAR: int = 2050
    DEFAULT_CURRENCY: str = "KES"

    # Annual budgets match transactions to line items by substring
    ANNUAL_SUBSTRING_MATCH: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        validate_default = True

    @property
    def async_db_url(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


@lru_cache()
def get_settings() -> Settings:
    """Settings are parsed once per process."""
    return Settings()


settings = get_settings()
