"""Environment-based settings for the job board client."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_API_URL = "http://localhost:3001"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    api_url: str = DEFAULT_API_URL
    auth_token: Optional[str] = None
    cache_path: Path = Path("data/jobs.db")
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    timeout: int = 15
    max_retries: int = 3
    page_size: int = 20

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_url=os.getenv("JOBBOARD_API_URL", DEFAULT_API_URL).rstrip("/"),
            auth_token=os.getenv("JOBBOARD_AUTH_TOKEN") or None,
            cache_path=Path(os.getenv("JOBBOARD_CACHE_PATH", "data/jobs.db")),
            log_level=os.getenv("JOBBOARD_LOG_LEVEL", "INFO").upper(),
            log_dir=Path(os.getenv("JOBBOARD_LOG_DIR", "logs")),
            timeout=_int_env("JOBBOARD_TIMEOUT", 15),
            max_retries=_int_env("JOBBOARD_MAX_RETRIES", 3),
            page_size=_int_env("JOBBOARD_PAGE_SIZE", 20),
        )
