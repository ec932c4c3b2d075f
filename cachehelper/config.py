import os
from dataclasses import dataclass


def _bool_env(name, default=False):
    v = os.getenv(name)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "y")


@dataclass
class Config:
    APP_NAME: str
    LOG_LEVEL: str
    # how long get_or_load waits on a per-key lock before giving up (seconds)
    LOCK_TIMEOUT_SEC: float
    DEFAULT_TTL_SEC: float
    # simulated backend latency for the demo api
    BACKEND_LATENCY_SEC: float
    TRACING_ENABLED: bool
    PORT: int


def load_config() -> Config:
    return Config(
        APP_NAME=os.getenv("APP_NAME", "cachehelper"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        LOCK_TIMEOUT_SEC=float(os.getenv("LOCK_TIMEOUT_SEC", "300")),
        DEFAULT_TTL_SEC=float(os.getenv("DEFAULT_TTL_SEC", "60")),
        BACKEND_LATENCY_SEC=float(os.getenv("BACKEND_LATENCY_SEC", "0.2")),
        TRACING_ENABLED=_bool_env("TRACING_ENABLED", default=False),
        PORT=int(os.getenv("PORT", "8000")),
    )


config = load_config()
