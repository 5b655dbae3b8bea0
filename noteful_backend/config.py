import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from noteful_database.db import DEFAULT_DATABASE_URL


# PUBLIC_INTERFACE
class Settings(BaseModel):
    """
    Process-wide configuration, read once at startup and passed to create_app().
    """
    database_url: str = DEFAULT_DATABASE_URL
    jwt_secret: str = "temporary_dev_secret"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = Field(default=60 * 24 * 7, gt=0)  # 7 days
    cors_origins: str = "*"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log_level '{v}'")
        return upper

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @classmethod
    def from_env(cls):
        """Builds settings from the environment (and a .env file, if present)."""
        load_dotenv()
        env = {
            "database_url": os.getenv("DATABASE_URL"),
            "jwt_secret": os.getenv("JWT_SECRET"),
            "jwt_algorithm": os.getenv("JWT_ALGORITHM"),
            "jwt_expiry_minutes": os.getenv("JWT_EXPIRY_MINUTES"),
            "cors_origins": os.getenv("CORS_ORIGINS"),
            "log_level": os.getenv("LOG_LEVEL"),
        }
        return cls(**{key: value for key, value in env.items() if value is not None})
