"""Logging setup shared by collaborators that embed the engine."""

import logging
from typing import Optional

from .config import EngineConfig


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None, config: Optional[EngineConfig] = None) -> None:
    """
    Configure logging.

    An explicit level wins, then config.log_level, then LOG_LEVEL
    from the environment.
    """
    if level is None:
        level = (config or EngineConfig.from_env()).log_level

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
