# keyline/config.py
"""
Configuration for the keyline console.

Values are loaded from ``KEYLINE_*`` environment variables (and an optional
``.env`` file) and validated with Pydantic. Every field has a default, so a
bare ``ConsoleConfig()`` always works.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import structlog
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from keyline.signal_queue import QUEUE_CAPACITY

logger = structlog.get_logger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

# Name of the session variable holding a custom prompt expression.
PROMPT_VARIABLE = "PROMPT"

# Evaluated by the session: a quoted string with ${NAME} expansion.
DEFAULT_PROMPT = '"\x1b[1m${USER}\x1b[0m@${APPLICATION}> "'

# Last resort when the prompt expression cannot be produced at all.
FALLBACK_PROMPT = "$ "


class ConsoleConfig(BaseSettings):
    """Runtime settings for one console."""

    queue_capacity: int = Field(QUEUE_CAPACITY, alias="KEYLINE_QUEUE_CAPACITY")
    default_prompt: str = Field(DEFAULT_PROMPT, alias="KEYLINE_DEFAULT_PROMPT")
    fallback_prompt: str = Field(FALLBACK_PROMPT, alias="KEYLINE_FALLBACK_PROMPT")
    application: str = Field("keyline", alias="KEYLINE_APPLICATION")
    branding_file: Optional[Path] = Field(None, alias="KEYLINE_BRANDING_FILE")
    poll_interval: float = Field(0.1, alias="KEYLINE_POLL_INTERVAL")
    show_tracebacks: bool = Field(False, alias="KEYLINE_SHOW_TRACEBACKS")
    raw_mode: bool = Field(True, alias="KEYLINE_RAW_MODE")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING", alias="KEYLINE_LOG_LEVEL"
    )

    model_config = {"env_file": _ENV_FILE, "extra": "ignore", "populate_by_name": True}

    @model_validator(mode="after")
    def clamp_limits(self) -> "ConsoleConfig":
        if self.queue_capacity < 1:
            logger.warning("config.queue_capacity_clamped", value=self.queue_capacity)
            self.queue_capacity = 1
        if self.poll_interval <= 0:
            self.poll_interval = 0.1
        if not self.fallback_prompt:
            self.fallback_prompt = FALLBACK_PROMPT
        return self
