from pydantic import field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv, find_dotenv
from os import getenv
from typing import Optional

from sqlalchemy.engine import URL

_env_path = find_dotenv(usecwd=True)  # locate a .env file in the working folder or its parents
if _env_path:
    load_dotenv(_env_path)


class Settings(BaseSettings):
    # Server
    HOST: str = getenv('HOST', '0.0.0.0')
    PORT: int = int(getenv('PORT', '3000'))
    LOG_LEVEL: str = getenv('LOG_LEVEL', 'INFO')

    # Database related
    DB_HOST: str = getenv('DB_HOST', 'localhost')
    DB_PORT: int = int(getenv('DB_PORT', '5432'))
    DB_USER: str = getenv('DB_USER', 'postgres')
    DB_PASSWORD: str = getenv('DB_PASSWORD', 'postgres')
    DB_NAME: str = getenv('DB_NAME', 'postgres')

    # Pool sizing, mirrors the engine arguments
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: float = 30.0

    # Seconds; unset keeps the 5s default, empty or 0 disables the probe deadline
    DB_CHECK_TIMEOUT: Optional[float] = 5.0
    DB_CONNECT_TIMEOUT: int = 5

    @field_validator("DB_CHECK_TIMEOUT", mode="before")
    @classmethod
    def _blank_timeout_is_none(cls, value):
        # DB_CHECK_TIMEOUT= in .env or compose blanks the variable
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def database_url(self) -> URL:
        """SQLAlchemy URL for the demo database (password is escaped by URL.create)."""
        return URL.create(
            "postgresql+psycopg2",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )

    @property
    def check_timeout(self) -> Optional[float]:
        if not self.DB_CHECK_TIMEOUT or self.DB_CHECK_TIMEOUT <= 0:
            return None
        return self.DB_CHECK_TIMEOUT


settings = Settings()
