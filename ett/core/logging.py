"""Logging setup for the ett-check command line."""

from __future__ import annotations

import logging
from typing import Optional

from ett.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once, using the settings level unless overridden."""

    resolved = (level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=LOG_FORMAT)
