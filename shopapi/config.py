# shopapi/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

    DATABASE_URL: str = "sqlite:///./shopapi.db"

    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 360

    # "dev" or "prod"
    ENVIRONMENT: str = "dev"
    LOG_LEVEL: str = "INFO"

    FRONTEND_URL: Optional[str] = None

    @property
    def database_url(self) -> str:
        # SQLAlchemy requires postgresql:// instead of the legacy postgres:// scheme
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url


settings = Settings()
