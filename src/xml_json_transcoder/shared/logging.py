"""Structured logging utilities for the XML-to-JSON transcoder.

Loggers are created per component instance and carry a correlation ID so the
records of one conversion can be traced through the builder, the parser
adapters and the CLI. Nothing here holds process-wide state apart from the
stdlib logger registry.
"""

import logging
from typing import Any, Dict, Optional


class CorrelationLogger:
    """Logger that stamps every record with a component and correlation ID.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for request tracking
        component: Component name; defaults to the last part of ``name``
    """

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]

    def with_correlation(self, correlation_id: Optional[str]) -> "CorrelationLogger":
        """Return a logger for the same component bound to another correlation ID."""
        return CorrelationLogger(self.logger.name, correlation_id, self.component)

    def is_enabled_for(self, level: int) -> bool:
        """Check whether records at ``level`` would be emitted."""
        return self.logger.isEnabledFor(level)

    def log(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False
    ) -> None:
        """Emit ``message`` at ``level`` with correlation info merged into ``extra``."""
        if not self.logger.isEnabledFor(level):
            return
        fields = {"component": self.component, "correlation_id": self.correlation_id}
        if extra:
            fields.update(extra)
        self.logger.log(level, message, extra=fields, exc_info=exc_info)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.log(logging.WARNING, message, extra)

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = True
    ) -> None:
        """Log an error, with the active exception's traceback by default."""
        self.log(logging.ERROR, message, extra, exc_info)


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance."""
    return CorrelationLogger(name, correlation_id, component)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for command-line use.

    Verbose selects DEBUG, quiet selects ERROR, otherwise WARNING. Records
    from other libraries, which have no component, are shown with ``-``.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "%(levelname)s %(name)s [%(component)s] %(message)s",
        defaults={"component": "-"},
    ))
    logging.basicConfig(level=level, handlers=[handler])
