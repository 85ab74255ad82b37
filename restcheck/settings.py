# restcheck/settings.py
from typing import Any, Dict, Literal, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from restcheck.types import ConfigurationError

JSONPLACEHOLDER_URL = "https://jsonplaceholder.typicode.com"
RANDOMUSER_URL = "https://randomuser.me"


class Settings(BaseSettings):
    """
    Centralized, env-driven configuration for a check run.
    Override via RESTCHECK_* environment variables, a .env file at repo root,
    or CLI flags.
    """
    jsonplaceholder_url: str = Field(default=JSONPLACEHOLDER_URL)
    randomuser_url: str = Field(default=RANDOMUSER_URL)
    timeout_sec: float = Field(default=10.0, gt=0)
    verify_ssl: bool = Field(default=True)
    workers: int = Field(default=1, ge=1, le=64)
    mode: Literal["live", "record", "replay"] = Field(default="live")
    cassette_dir: Optional[str] = Field(default=None)  # None: bundled cassettes
    schemas_dir: Optional[str] = Field(default=None)   # None: bundled schemas
    report_dir: Optional[str] = Field(default=None)
    log_level: str = Field(default="INFO")
    verbose: bool = Field(default=False)

    # Pydantic v2 config: ignore unknown envs, load .env in UTF-8
    model_config = SettingsConfigDict(
        env_prefix="RESTCHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("jsonplaceholder_url", "randomuser_url")
    @classmethod
    def _check_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base URL must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {v!r}")
        return v

    def base_url(self, api: str) -> str:
        """Base URL for a scenario group."""
        urls = {
            "jsonplaceholder": self.jsonplaceholder_url,
            "randomuser": self.randomuser_url,
        }
        if api not in urls:
            raise ConfigurationError(f"unknown API {api!r}; expected one of {sorted(urls)}")
        return urls[api]


def load_settings(**overrides: Any) -> Settings:
    """Build Settings from env/.env with explicit overrides; None overrides are ignored."""
    values: Dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"invalid settings: {problems}") from e
