"""
Core Module Package.

This package contains the infrastructure components
that all other modules depend on.

Components:
- clock: Unified time abstraction
- config: Environment-driven engine configuration
- exceptions: Root of the exception hierarchy
- logging_config: Logging setup
"""

from .clock import ClockFactory, ClockProtocol, MockClock, SystemClock, now_utc
from .config import EngineConfig
from .exceptions import ConfigurationError, ErrorClassification, SentimentEngineError
from .logging_config import setup_logging


__all__ = [
    "ClockFactory",
    "ClockProtocol",
    "MockClock",
    "SystemClock",
    "now_utc",
    "EngineConfig",
    "ConfigurationError",
    "ErrorClassification",
    "SentimentEngineError",
    "setup_logging",
]
