"""Command-line interface for the XML-to-JSON transcoder."""

from .main import main

__all__ = ["main"]
