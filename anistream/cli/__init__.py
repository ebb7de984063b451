"""
CLI Layer - Command-line interface components.

This module contains the Typer-based CLI application that exposes the
resolution pipeline from the terminal.
"""

from anistream.cli.main import app

__all__ = ["app"]
