"""Configuration classes for the XML-to-JSON transcoder.

The rendering mode (compact or indented) is chosen once, when a builder is
constructed, and stays fixed for the life of that builder. Everything else a
conversion needs (text key, whitespace handling, output encoding, parser
backend) travels in the same immutable configuration object.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_TEXT_KEY = "content"
DEFAULT_INDENT_WIDTH = 2
SUPPORTED_PARSERS = ("sax", "lxml")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class TranscoderConfig:
    """Immutable configuration for one transcoder or builder instance.

    Thread-safe due to frozen dataclass implementation.
    """

    compact: bool = True
    indent_width: int = DEFAULT_INDENT_WIDTH
    text_key: str = DEFAULT_TEXT_KEY
    skip_whitespace_text: bool = True
    encoding: str = "utf-8"
    parser: str = "sax"
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.indent_width, int) or self.indent_width < 0:
            raise ConfigValidationError(
                "indent_width must be an integer >= 0",
                field_name="indent_width",
            )
        if not self.text_key:
            raise ConfigValidationError(
                "text_key cannot be empty",
                field_name="text_key",
                suggestions=[DEFAULT_TEXT_KEY, "#text"],
            )
        if not self.encoding:
            raise ConfigValidationError(
                "encoding cannot be empty",
                field_name="encoding",
                suggestions=["utf-8"],
            )
        if self.parser not in SUPPORTED_PARSERS:
            raise ConfigValidationError(
                f"Unknown parser backend: {self.parser!r}",
                field_name="parser",
                suggestions=list(SUPPORTED_PARSERS),
            )

    @classmethod
    def compact_output(cls) -> "TranscoderConfig":
        """Create configuration for whitespace-free JSON."""
        return cls(compact=True)

    @classmethod
    def indented_output(cls, indent_width: int = DEFAULT_INDENT_WIDTH) -> "TranscoderConfig":
        """Create configuration for pretty-printed JSON."""
        return cls(compact=False, indent_width=indent_width)

    def override(self, **kwargs: Any) -> "TranscoderConfig":
        """Create a new configuration with selected values replaced.

        Raises:
            ConfigValidationError: If an unknown field is given or a new value
                fails validation
        """
        valid_fields = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - valid_fields)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration field(s): {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(valid_fields),
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Serialize configuration to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranscoderConfig":
        """Create configuration from a dictionary.

        Unknown keys are rejected rather than ignored so that typos in a
        configuration file do not silently fall back to defaults.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a JSON object")
        return cls().override(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "TranscoderConfig":
        """Create configuration from a JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Path) -> "TranscoderConfig":
        """Load configuration from a JSON file."""
        try:
            text = Path(config_path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read config file {config_path}: {e}") from e
        return cls.from_json(text)
