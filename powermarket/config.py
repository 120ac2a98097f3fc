"""
Power Market Service - Configuration
====================================

All settings come from the environment (optionally a local .env file).
Every field has a default so the service starts without any configuration.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()


def _env_int(name: str, default: int, min_value: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"[Config] {name}={raw!r} is not an integer, using {default}")
        return default
    if min_value is not None and value < min_value:
        logger.warning(f"[Config] {name}={value} is below {min_value}, using {default}")
        return default
    return value


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[Config] {name}={raw!r} is not an integer, ignoring")
        return None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime configuration for the service"""
    data_dir: str = "./data"
    source_files: List[str] = field(default_factory=lambda: ["rawdata_0501.xlsx", "rawdata_0601.xlsx"])

    # Forecasting
    window_size: int = 168           # one week of recent observations
    noise_seed: Optional[int] = None  # None = unseeded (stochastic output)

    # Historical query
    history_limit: int = 1000

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    load_on_startup: bool = True
    log_level: str = "INFO"

    @property
    def source_paths(self) -> List[Path]:
        base = Path(self.data_dir)
        return [base / name for name in self.source_files]

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            data_dir=os.getenv("POWERMARKET_DATA_DIR", defaults.data_dir),
            source_files=_env_list("POWERMARKET_SOURCE_FILES", defaults.source_files),
            window_size=_env_int("POWERMARKET_WINDOW_SIZE", defaults.window_size, min_value=1),
            noise_seed=_env_optional_int("POWERMARKET_NOISE_SEED"),
            history_limit=_env_int("POWERMARKET_HISTORY_LIMIT", defaults.history_limit, min_value=1),
            host=os.getenv("HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
            cors_origins=_env_list("POWERMARKET_CORS_ORIGINS", defaults.cors_origins),
            load_on_startup=_env_bool("POWERMARKET_LOAD_ON_STARTUP", defaults.load_on_startup),
            log_level=os.getenv("POWERMARKET_LOG_LEVEL", defaults.log_level).upper(),
        )
