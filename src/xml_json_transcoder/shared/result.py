"""Result metrics for transcoding operations."""

from dataclasses import dataclass


@dataclass
class PerformanceMetrics:
    """Performance metrics for one transcoded document."""

    processing_time_ms: float = 0.0
    elements_processed: int = 0
    characters_processed: int = 0
    bytes_written: int = 0
    max_depth: int = 0

    def to_dict(self) -> dict:
        """Convert metrics to dictionary representation."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "elements_processed": self.elements_processed,
            "characters_processed": self.characters_processed,
            "bytes_written": self.bytes_written,
            "max_depth": self.max_depth,
        }
