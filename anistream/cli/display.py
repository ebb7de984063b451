"""
Result Display - Rich rendering for resolution results and episode lists.
"""

from typing import Union

from rich.panel import Panel
from rich.table import Table

from anistream.core.config_schemas import AppSettings
from anistream.core.models import (
    PROVIDER_PRIORITY,
    AnimeInfo,
    EmbedResult,
    FallbackResult,
    StreamResult,
)
from anistream.ui import display_warning, get_console


class ResultDisplay:
    """Renders pipeline output as Rich tables and panels."""

    def __init__(self):
        self.console = get_console()

    def show_result(self, result: Union[StreamResult, EmbedResult, FallbackResult]) -> None:
        if isinstance(result, StreamResult):
            self.show_stream(result)
        elif isinstance(result, EmbedResult):
            self.show_embed(result)
        else:
            self.show_fallback(result)

    def show_stream(self, result: StreamResult) -> None:
        table = Table(
            title=f"Sources from {result.provider or 'unknown provider'}",
            show_header=True,
            header_style="bold blue",
            border_style="blue",
        )
        table.add_column("#", style="dim", width=3)
        table.add_column("Quality", style="green", no_wrap=True)
        table.add_column("Format", style="yellow")
        table.add_column("URL", style="white", overflow="fold")

        for index, source in enumerate(result.sources, 1):
            table.add_row(str(index), source.quality, "HLS" if source.is_segmented else "File", source.url)

        self.console.print(table)

        if result.headers:
            headers = "\n".join(f"[dim]{name}:[/dim] {value}" for name, value in result.headers.items())
            self.console.print(Panel(headers, title="Required Headers", border_style="cyan"))

        if result.subtitles:
            subtitles = Table(title="Subtitles", show_header=True, header_style="bold cyan")
            subtitles.add_column("Language", style="cyan")
            subtitles.add_column("URL", overflow="fold")
            for track in result.subtitles:
                subtitles.add_row(f"{track.display_language} ({track.language_code})", track.url)
            self.console.print(subtitles)

    def show_embed(self, result: EmbedResult) -> None:
        self.console.print(Panel(
            f"[blue]{result.url}[/blue]",
            title=f"Embedded player ({result.provider or 'unknown provider'})",
            border_style="yellow",
            padding=(1, 2)
        ))

    def show_fallback(self, result: FallbackResult) -> None:
        if not result.links:
            display_warning(
                "No streaming sources found and no title was given for fallback links.\n"
                "Pass [cyan]--title[/cyan] to get links to watch sites.",
                title="Nothing Found"
            )
            return

        table = Table(
            title="No direct sources found, try these sites",
            show_header=True,
            header_style="bold yellow",
            border_style="yellow",
        )
        table.add_column("Site", style="cyan")
        table.add_column("URL", overflow="fold")
        for link in result.links:
            table.add_row(link.label, link.url)

        self.console.print(table)

    def show_anime_info(self, info: AnimeInfo) -> None:
        total = info.total_episodes if info.total_episodes is not None else len(info.episodes)
        table = Table(
            title=f"{info.title} ({total} episodes)",
            show_header=True,
            header_style="bold blue",
            border_style="blue",
        )
        table.add_column("#", style="dim", width=6)
        table.add_column("Episode ID", style="green")
        table.add_column("Title", style="white")

        for episode in info.episodes:
            table.add_row(f"{episode.number:g}", episode.id, episode.title or "")

        self.console.print(table)

    def show_providers(self, settings: AppSettings) -> None:
        table = Table(
            title="Providers (in priority order)",
            show_header=True,
            header_style="bold blue",
            border_style="blue",
        )
        table.add_column("#", style="dim", width=3)
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Enabled")
        table.add_column("Base URL", overflow="fold")
        table.add_column("Interval", justify="right")
        table.add_column("Serialized")
        table.add_column("Backends", style="dim")

        for index, name in enumerate(PROVIDER_PRIORITY, 1):
            provider = settings.provider(name)
            table.add_row(
                str(index),
                name.value,
                "[green]yes[/green]" if provider.enabled else "[red]no[/red]",
                provider.base_url,
                f"{provider.min_interval_ms} ms",
                "yes" if provider.serialize else "no",
                ", ".join(provider.backends),
            )

        self.console.print(table)


__all__ = ["ResultDisplay"]
