"""
UI Layer - Rich console and error display.

This module contains the shared Rich console and the error panels used by
every CLI command.
"""

from anistream.ui.console import get_console, setup_console
from anistream.ui.error_handler import ErrorHandler, handle_error, display_warning

__all__ = [
    # Console Management
    "get_console",
    "setup_console",
    # Error Handling
    "ErrorHandler",
    "handle_error",
    "display_warning",
]
