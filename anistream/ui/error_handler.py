"""
Error Handler - Error panels with context and suggestions.

This module renders AniStream errors consistently across CLI commands, with
provider and episode context where the error carries it.
"""

import traceback
from typing import List, Optional

from rich.panel import Panel

from anistream.core.exceptions import (
    AniStreamError,
    ConfigurationError,
    UpstreamError,
    UpstreamMalformedResponseError,
    UpstreamNetworkError,
    UpstreamNoDataError,
)
from anistream.ui.console import get_console


ERROR_STYLE = "bold red"
WARNING_STYLE = "yellow"
INFO_STYLE = "cyan"


class ErrorHandler:
    """Handles error display with consistent formatting and helpful context."""

    @property
    def console(self):
        return get_console()

    def handle_error(
        self,
        error: Exception,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """
        Handle and display an error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Additional context about where the error occurred
            show_traceback: Whether to show the full traceback
        """
        if isinstance(error, ConfigurationError):
            self._display_configuration_error(error, context, show_traceback)
        elif isinstance(error, UpstreamError):
            self._display_upstream_error(error, context, show_traceback)
        elif isinstance(error, AniStreamError):
            self._display_generic_anistream_error(error, context, show_traceback)
        else:
            self._handle_generic_error(error, context, show_traceback)

    def _render(
        self,
        title: str,
        content_parts: List[str],
        suggestions: List[str],
        border_style: str = ERROR_STYLE
    ) -> None:
        if suggestions:
            content_parts.append(f"\n\n[{INFO_STYLE}]Suggestions:[/{INFO_STYLE}]")
            for suggestion in suggestions:
                content_parts.append(f"• {suggestion}")

        panel = Panel(
            "\n".join(content_parts),
            title=title,
            border_style=border_style,
            padding=(1, 2)
        )

        self.console.print(panel)

    def _display_configuration_error(
        self,
        error: ConfigurationError,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """Display configuration error with specific suggestions."""
        content_parts = [f"[{ERROR_STYLE}]{error.message}[/{ERROR_STYLE}]"]

        if error.config_path:
            content_parts.append(f"\n[dim]Configuration file:[/dim] [cyan]{error.config_path}[/cyan]")

        if context:
            content_parts.append(f"\n[dim]Context:[/dim] {context}")

        if show_traceback and error.details:
            content_parts.append(f"\n[dim]Details:[/dim]\n{error.details}")

        suggestions = [
            "Check configuration file syntax and format",
            "Delete settings.json to regenerate the defaults",
        ]

        self._render("Configuration Error", content_parts, suggestions)

    def _display_upstream_error(
        self,
        error: UpstreamError,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """Display an upstream provider failure."""
        content_parts = [f"[{ERROR_STYLE}]{error.message}[/{ERROR_STYLE}]"]

        if error.provider:
            content_parts.append(f"\n[dim]Provider:[/dim] [cyan]{error.provider}[/cyan]")

        if error.episode_ref:
            content_parts.append(f"\n[dim]Episode:[/dim] {error.episode_ref}")

        url = getattr(error, "url", None)
        if url:
            content_parts.append(f"\n[dim]URL:[/dim] [blue]{url}[/blue]")

        if context:
            content_parts.append(f"\n[dim]Context:[/dim] {context}")

        if show_traceback and error.details:
            content_parts.append(f"\n[dim]Details:[/dim]\n{error.details}")

        if isinstance(error, UpstreamNetworkError):
            title = "Network Error"
            suggestions = [
                "Check your internet connection",
                "Verify the provider base_url in settings.json",
                "Raise resolver.max_retries for flaky upstreams",
            ]
            if error.status_code and error.status_code >= 500:
                suggestions.insert(0, "The provider server is experiencing issues")
        elif isinstance(error, UpstreamNoDataError):
            title = "Not Found"
            suggestions = [
                "Check the spelling of the title or id",
                "Try the provider's own anime id instead of a title",
            ]
        elif isinstance(error, UpstreamMalformedResponseError):
            title = "Invalid Response"
            suggestions = ["The provider API may have changed; try again later"]
        else:
            title = "Provider Error"
            suggestions = []

        self._render(title, content_parts, suggestions)

    def _display_generic_anistream_error(
        self,
        error: AniStreamError,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """Display generic AniStream error."""
        content_parts = [f"[{ERROR_STYLE}]{error.message}[/{ERROR_STYLE}]"]

        if context:
            content_parts.append(f"\n[dim]Context:[/dim] {context}")

        if error.details:
            content_parts.append(f"\n[dim]Details:[/dim] {error.details}")

        if show_traceback:
            content_parts.append(f"\n\n[dim]Traceback:[/dim]\n{traceback.format_exc()}")

        self._render("Error", content_parts, [])

    def _handle_generic_error(
        self,
        error: Exception,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """Handle generic Python exceptions."""
        error_type = error.__class__.__name__
        content_parts = [f"[{ERROR_STYLE}]{error_type}: {str(error)}[/{ERROR_STYLE}]"]

        if context:
            content_parts.append(f"\n[dim]Context:[/dim] {context}")

        if show_traceback:
            content_parts.append(f"\n\n[dim]Traceback:[/dim]\n{traceback.format_exc()}")

        suggestions = [
            "Run again with --debug for detailed logs",
            "Report this issue if it persists",
        ]

        self._render("Unexpected Error", content_parts, suggestions)

    def display_warning(self, message: str, title: str = "Warning") -> None:
        """Display a warning message."""
        panel = Panel(
            f"[{WARNING_STYLE}]{message}[/{WARNING_STYLE}]",
            title=f"[{WARNING_STYLE}]{title}[/{WARNING_STYLE}]",
            border_style=WARNING_STYLE,
            padding=(1, 2)
        )

        self.console.print(panel)


# Global error handler instance
_error_handler = ErrorHandler()


def handle_error(
    error: Exception,
    context: Optional[str] = None,
    show_traceback: bool = False
) -> None:
    """
    Handle and display an error using the global error handler.

    Args:
        error: Exception to handle
        context: Additional context
        show_traceback: Whether to show traceback
    """
    _error_handler.handle_error(error, context, show_traceback)


def display_warning(message: str, title: str = "Warning") -> None:
    """Display a warning message using the global error handler."""
    _error_handler.display_warning(message, title)


# Export error handling functions
__all__ = [
    "ErrorHandler",
    "handle_error",
    "display_warning",
]
