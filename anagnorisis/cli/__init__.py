"""Command line interface for replaying and describing recorded traces."""

from .main import cli, main

__all__ = ["cli", "main"]
