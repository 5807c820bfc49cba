# relaydrop/config.py

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv(os.path.join(os.getcwd(), ".env"))


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _positive_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


# =========================
# CONFIGURATION
# =========================

@dataclass
class Settings:
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./relaydrop.db"))
    session_ttl_seconds: int = field(default_factory=lambda: _positive_int("SESSION_TTL_SECONDS", "1800"))
    message_ttl_seconds: int = field(default_factory=lambda: _positive_int("MESSAGE_TTL_SECONDS", "1800"))
    max_plaintext_bytes: int = field(default_factory=lambda: _positive_int("MAX_PLAINTEXT_BYTES", str(50 * 1024)))
    base_url: str = field(default_factory=lambda: os.getenv("BASE_URL", ""))
    allow_non_atomic_take: bool = field(default_factory=lambda: _flag("ALLOW_NON_ATOMIC_TAKE", "0"))
    rate_limit_enabled: bool = field(default_factory=lambda: _flag("RATE_LIMIT_ENABLED", "1"))
    session_rate_limit: str = field(default_factory=lambda: os.getenv("SESSION_RATE_LIMIT", "30/minute"))
    send_rate_limit: str = field(default_factory=lambda: os.getenv("SEND_RATE_LIMIT", "60/minute"))
    receive_rate_limit: str = field(default_factory=lambda: os.getenv("RECEIVE_RATE_LIMIT", "120/minute"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    db_pool_size: int = field(default_factory=lambda: _positive_int("DB_POOL_SIZE", "5"))
    db_max_overflow: int = field(default_factory=lambda: _positive_int("DB_MAX_OVERFLOW", "10"))


settings = Settings()
