"""Shared utilities for the XML-to-JSON transcoder.

This module provides configuration objects, error types, result metrics and
logging helpers used across the tree, output, API and CLI layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    TranscoderConfig,
)
from .errors import (
    ProtocolViolationError,
    TranscoderError,
    UnsupportedEncodingError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import PerformanceMetrics

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "TranscoderConfig",
    "ProtocolViolationError",
    "TranscoderError",
    "UnsupportedEncodingError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "PerformanceMetrics",
]
