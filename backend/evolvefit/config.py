from __future__ import annotations
import os
from pydantic import BaseModel


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "")
    return float(raw) if raw else None


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "evolvefit-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "EvolveFit")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Key/value persistence: memory|redis
    kv_backend: str = os.getenv("KV_BACKEND", "memory")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # Generative model provider
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
    gemini_timeout_seconds: float | None = _optional_float("GEMINI_TIMEOUT_SECONDS")  # None = wait forever

    # In-process broadcast layer
    realtime_max_delay_ms: int = int(os.getenv("REALTIME_MAX_DELAY_MS", "100"))
    realtime_buffer_cap: int = int(os.getenv("REALTIME_BUFFER_CAP", "1000"))
    realtime_buffer_keep: int = int(os.getenv("REALTIME_BUFFER_KEEP", "500"))
    sse_heartbeat_seconds: float = float(os.getenv("SSE_HEARTBEAT_SECONDS", "15"))

settings = Settings()
