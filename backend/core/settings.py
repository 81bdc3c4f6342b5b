from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

MODES = ("demo", "sheets")
DEFAULT_REDIRECT_URL = "http://localhost:3000/auth/callback"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(slots=True)
class Settings:
    """Runtime configuration resolved from environment variables."""

    mode: str = "demo"
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_url: str = DEFAULT_REDIRECT_URL
    spreadsheet_id: str = ""
    sync_interval: float = 5.0
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            logger.warning("Unknown PAYROLL_MODE %r; running in demo mode", self.mode)

    @property
    def demo(self) -> bool:
        return self.mode != "sheets"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]

        return cls(
            mode=(os.getenv("PAYROLL_MODE") or "demo").strip().lower(),
            google_client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
            google_redirect_url=os.getenv("GOOGLE_REDIRECT_URL") or DEFAULT_REDIRECT_URL,
            spreadsheet_id=os.getenv("GOOGLE_SPREADSHEET_ID", ""),
            sync_interval=_float_env("PAYROLL_SYNC_INTERVAL", 5.0),
            cors_origins=origins or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
