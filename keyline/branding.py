"""Branding — the welcome message shown when a console starts.

Branding lives in TOML files with a top-level ``welcome`` key. Files are
read in order and later files override earlier ones:

1. the package default (``keyline/branding.toml``)
2. ``~/.config/keyline/branding.toml``
3. ``./branding.toml`` in the current working directory
4. an explicit file (``KEYLINE_BRANDING_FILE``), if configured

Missing or unreadable files are skipped; having no branding is not an error.
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Optional

import structlog

logger = structlog.get_logger(__name__)

_PACKAGE_BRANDING = Path(__file__).resolve().parent / "branding.toml"


def branding_paths(explicit: Optional[Path] = None) -> list[Path]:
    """Return the branding search path, lowest precedence first."""
    paths = [
        _PACKAGE_BRANDING,
        Path.home() / ".config" / "keyline" / "branding.toml",
        Path.cwd() / "branding.toml",
    ]
    if explicit is not None:
        paths.append(Path(explicit).expanduser())
    return paths


def load_branding(paths: Iterable[Path]) -> dict[str, Any]:
    """Merge the TOML tables found at *paths*; later files win."""
    merged: dict[str, Any] = {}
    for path in paths:
        if not path.is_file():
            continue
        try:
            with open(path, "rb") as f:
                merged.update(tomllib.load(f))
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.debug("branding.unreadable", path=str(path), error=str(e))
    return merged


def welcome_message(branding: dict[str, Any]) -> Optional[str]:
    welcome = branding.get("welcome")
    if isinstance(welcome, str) and welcome:
        return welcome
    return None
