from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn, computed_field
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    POSTGRES_USER: str = "creatorsync"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "creatorsync"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    @computed_field
    def DATABASE_URL(self) -> PostgresDsn:
        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD or None,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    # Connection pool
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    SQL_ECHO: bool = False

    # Signing key for bearer tokens. Must be overridden outside local dev.
    SECRET_KEY: str = "change-me-in-production-with-a-32-byte-key"
    JWT_ALGORITHM: str = "HS256"
    TOKEN_TTL_HOURS: int = 24 * 7

    # Feed settings
    FEED_SIZE: int = 10

    # Public domain; disables the interactive docs when set
    APP_DOMAIN: Optional[str] = None

settings = Settings()
