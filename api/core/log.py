"""
Logging setup. Modules log through `logging.getLogger(__name__)`.
"""

from __future__ import annotations

import logging
import sys

from .config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(settings: Settings) -> None:
    # basicConfig is a no-op when the root logger already has handlers (uvicorn, pytest).
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT, stream=sys.stdout)
    logging.getLogger().setLevel(settings.log_level.upper())
