"""Application settings from environment variables."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "PROMPTDECK_"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


@dataclass
class Settings:
    """Runtime settings; CLI flags override what the environment provides."""

    data_path: Path = field(default=Path("prompts-data.json"))
    # Development mode reads markdown sources through this manifest.
    manifest_path: Path | None = field(default=None)
    prompts_root: Path = field(default=Path("prompts"))
    state_dir: Path = field(default=Path(".promptdeck"))
    copy_feedback_seconds: float = field(default=5.0)
    label_max_length: int | None = field(default=100)
    log_level: str = field(default="WARNING")

    @property
    def state_db_path(self) -> Path:
        return self.state_dir / "state.db"

    @property
    def dev_mode(self) -> bool:
        return self.manifest_path is not None

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from ``PROMPTDECK_*`` environment variables."""
        manifest = os.getenv(f"{ENV_PREFIX}MANIFEST_PATH")
        label_max_length = cls._get_int(f"{ENV_PREFIX}LABEL_MAX_LENGTH", 100)
        return cls(
            data_path=Path(os.getenv(f"{ENV_PREFIX}DATA_PATH", "prompts-data.json")),
            manifest_path=Path(manifest) if manifest else None,
            prompts_root=Path(os.getenv(f"{ENV_PREFIX}PROMPTS_ROOT", "prompts")),
            state_dir=Path(os.getenv(f"{ENV_PREFIX}STATE_DIR", ".promptdeck")),
            copy_feedback_seconds=cls._get_float(f"{ENV_PREFIX}COPY_FEEDBACK_SECONDS", 5.0),
            label_max_length=label_max_length if label_max_length > 0 else None,
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "WARNING").upper(),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid number for %s: %s, using default %s", key, value, default)
            return default


def configure_logging(level: str = "WARNING") -> None:
    """Send ``promptdeck`` logs to stderr; safe to call more than once."""
    package_logger = logging.getLogger("promptdeck")
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
        package_logger.propagate = False
