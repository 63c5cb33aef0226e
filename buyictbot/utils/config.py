from __future__ import annotations
# buyictbot/utils/config.py
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv, find_dotenv

# Load .env from repo root/parents exactly once, before anything else reads env
load_dotenv(find_dotenv(usecwd=True))

DEFAULT_ENTRY_URL = "https://www.buyict.gov.au/sp?id=opportunities"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# --- helpers ---------------------------------------------------------------

def _clean_value(val: Optional[str]) -> str:
    """Trim whitespace and remove wrapping single/double quotes."""
    if not val:
        return ""
    s = val.strip()
    if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
        s = s[1:-1].strip()
    return s

def _env_str(name: str, default: str) -> str:
    return _clean_value(os.getenv(name)) or default

def _env_int(name: str, default: int) -> int:
    raw = _clean_value(os.getenv(name))
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None

def _env_bool(name: str, default: bool) -> bool:
    raw = _clean_value(os.getenv(name)).lower()
    if not raw:
        return default
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"{name} must be a boolean (true/false), got {raw!r}")

# --- Config ----------------------------------------------------------------

@dataclass
class Config:
    # --- Target ---
    entry_url: str = DEFAULT_ENTRY_URL
    data_file: str = "./data/data.json"

    # --- Browser ---
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    browser_locale: str = "en-AU"
    block_resources: bool = True                 # drop images/media/fonts

    # --- Timing (milliseconds) ---
    navigation_timeout_ms: int = 60000           # per goto / click
    idle_timeout_ms: int = 30000                 # networkidle wait
    settle_delay_ms: int = 1000                  # after a pagination click

    # --- Crawl runtime ---
    max_pages: int = 100                         # 0 = no cap
    detail_concurrency: int = 1                  # 1 = strictly sequential
    incremental_write: bool = False

    # --- Completion signal ---
    notify_sound: bool = True
    notify_sound_cmd: Optional[str] = None

    def __post_init__(self):
        if self.navigation_timeout_ms <= 0 or self.idle_timeout_ms <= 0:
            raise RuntimeError("Navigation and idle timeouts must be positive (unbounded waits are not allowed).")
        if self.settle_delay_ms < 0:
            raise RuntimeError("SETTLE_DELAY_MS must not be negative.")
        if self.max_pages < 0:
            raise RuntimeError("MAX_PAGES must be 0 (no cap) or positive.")
        if self.detail_concurrency < 1:
            raise RuntimeError("DETAIL_CONCURRENCY must be at least 1.")

    @classmethod
    def load(cls) -> "Config":
        # read from environment (populated by .env above)
        cfg = cls(
            # Target
            entry_url=_env_str("ENTRY_URL", DEFAULT_ENTRY_URL),
            data_file=_env_str("DATA_FILE", "./data/data.json"),

            # Browser
            headless=_env_bool("HEADLESS", True),
            user_agent=_env_str("USER_AGENT", DEFAULT_USER_AGENT),
            browser_locale=_env_str("BROWSER_LOCALE", "en-AU"),
            block_resources=_env_bool("BLOCK_RESOURCES", True),

            # Timing
            navigation_timeout_ms=_env_int("NAVIGATION_TIMEOUT_MS", 60000),
            idle_timeout_ms=_env_int("IDLE_TIMEOUT_MS", 30000),
            settle_delay_ms=_env_int("SETTLE_DELAY_MS", 1000),

            # Crawl runtime
            max_pages=_env_int("MAX_PAGES", 100),
            detail_concurrency=_env_int("DETAIL_CONCURRENCY", 1),
            incremental_write=_env_bool("INCREMENTAL_WRITE", False),

            # Completion signal
            notify_sound=_env_bool("NOTIFY_SOUND", True),
            notify_sound_cmd=_clean_value(os.getenv("NOTIFY_SOUND_CMD")) or None,
        )

        from buyictbot.utils.logger import logger
        logger.info(
            "Config loaded: ENTRY_URL=%s DATA_FILE=%s CONCURRENCY=%d INCREMENTAL=%s",
            cfg.entry_url, cfg.data_file, cfg.detail_concurrency, cfg.incremental_write,
        )
        return cfg
