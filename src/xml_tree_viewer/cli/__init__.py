"""Command-line interface for the XML tree viewer."""

from .main import main

__all__ = ["main"]
