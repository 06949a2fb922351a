"""
Application settings (Pydantic Settings).
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env next to backend/ (parent of whentomeet/)
_backend_dir = Path(__file__).resolve().parent.parent
_env_path = _backend_dir / ".env"

STORAGE_BACKENDS = ("memory", "redis", "file", "sql")


class Settings(BaseSettings):
    storage_backend: str = "memory"
    # Redis: REDIS_URL in .env, e.g. redis://localhost:6379/0
    redis_url: str = ""
    redis_key_prefix: str = "when-to-meet"
    # File backend: users.json + calendar.json live here
    data_dir: Path = _backend_dir / "data"
    database_url: str = "sqlite:///./whentomeet.db"
    cors_origins: str = ""

    # Client side (sync loop, terminal grid)
    api_base_url: str = "http://127.0.0.1:8000"
    poll_interval_seconds: float = 2.0
    client_timeout_seconds: float = 10.0
    whentomeet_identity_path: Path = Path.home() / ".whentomeet" / "user.json"

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("storage_backend", mode="after")
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        v = (v or "memory").strip().lower()
        if v not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}; got {v!r}")
        return v

    @field_validator("redis_url", "api_base_url", mode="after")
    @classmethod
    def strip_urls(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")

    @field_validator("poll_interval_seconds", mode="after")
    @classmethod
    def min_interval(cls, v: float) -> float:
        return max(0.25, v)

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
