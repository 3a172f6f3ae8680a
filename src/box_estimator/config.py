"""Runtime settings read from the environment; loads .env locally via python-dotenv."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr

DEFAULT_PACKER_URL = "https://global-api.3dbinpacking.com/packer/packIntoMany"
DEFAULT_PACKER_TIMEOUT = 3.0


class Settings(BaseModel):
    """Service configuration."""

    database_url: str | None = Field(None, description="PostgreSQL DSN of the box catalog")
    packer_url: str = Field(DEFAULT_PACKER_URL, description="External packer endpoint")
    packer_timeout: float = Field(DEFAULT_PACKER_TIMEOUT, gt=0, description="Upper bound in seconds on one packer call")
    credentials_username: str | None = Field(None, description="Packer API username")
    credentials_api_key: SecretStr | None = Field(None, description="Packer API key")
    box_catalog: str | None = Field(None, description="JSON list of boxes used instead of the database")
    cors_allow_origins: list[str] = Field(default_factory=list, description="Origins allowed to call the API from a browser")

    @classmethod
    def from_env(cls) -> "Settings":
        # Does not override variables that are already set
        load_dotenv()

        timeout_raw = os.getenv("PACKER_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_PACKER_TIMEOUT
        except ValueError:
            raise ValueError(f"PACKER_TIMEOUT must be a number of seconds, got {timeout_raw!r}")
        if timeout <= 0:
            raise ValueError(f"PACKER_TIMEOUT must be positive, got {timeout_raw!r}")

        api_key = os.getenv("CREDENTIALS_API_KEY")
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            packer_url=os.getenv("PACKER_URL") or DEFAULT_PACKER_URL,
            packer_timeout=timeout,
            credentials_username=os.getenv("CREDENTIALS_USERNAME") or None,
            credentials_api_key=SecretStr(api_key) if api_key else None,
            box_catalog=os.getenv("BOX_CATALOG") or None,
            cors_allow_origins=[o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o.strip()],
        )
