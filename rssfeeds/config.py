# rssfeeds/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load env from project root
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env")

# ── Env knobs ──────────────────────────────────────────────────────────────────
HOSTNAME = os.getenv("FEEDS_HOSTNAME", "localhost")
TLS_ENABLED = os.getenv("FEEDS_TLS_ENABLED", "1") == "1"
JWT_SECRET = os.getenv("JWT_SECRET", "")

# Fetch limits
FEED_FETCH_LIMIT = int(os.getenv("FEED_FETCH_LIMIT", "20"))
FEED_MAX_LIMIT = int(os.getenv("FEED_MAX_LIMIT", "50"))
INBOX_FETCH_LIMIT = int(os.getenv("INBOX_FETCH_LIMIT", "10"))

# Diagnostics
FEED_LOG_REQUESTS = os.getenv("FEED_LOG_REQUESTS", "0") == "1"

ALLOWED_ORIGINS: List[str] = [
    o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()
]


@dataclass(frozen=True)
class Settings:
    hostname: str = HOSTNAME
    tls_enabled: bool = TLS_ENABLED
    jwt_secret: str = JWT_SECRET
    fetch_limit: int = FEED_FETCH_LIMIT
    max_limit: int = FEED_MAX_LIMIT
    inbox_limit: int = INBOX_FETCH_LIMIT

    def get_protocol_and_hostname(self) -> str:
        scheme = "https" if self.tls_enabled else "http"
        return f"{scheme}://{self.hostname}"


_SETTINGS = Settings()


def get_settings() -> Settings:
    return _SETTINGS


__all__ = ["Settings", "get_settings", "ALLOWED_ORIGINS", "FEED_LOG_REQUESTS"]
