"""Display utilities for the startup screen."""

import sys

from rich.align import Align
from rich.console import Console
from rich.table import Table

from ephemera import __version__
from ephemera.config import Config
from ephemera.domain import RATE_LIMITS

# Force UTF-8 for Windows console
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")

console = Console()

LOGO = r"""
█▀▀ █▀█ █ █ █▀▀ █▀▄▀█ █▀▀ █▀█ ▄▀█
██▄ █▀▀ █▀█ ██▄ █ ▀ █ ██▄ █▀▄ █▀█
""".strip()


def _apply_gradient(lines: list[str], colors: list[str]) -> list[str]:
    """Apply color gradient to text lines."""
    return [
        f"[{colors[min(i, len(colors) - 1)]}]{line}[/{colors[min(i, len(colors) - 1)]}]"
        for i, line in enumerate(lines)
    ]


def build_rate_limit_table(config: Config) -> Table:
    """Table of the rate limit presets and whether they are enforced."""
    title = "Rate limits" if config.rate_limit.enabled else "Rate limits [red](disabled)[/red]"
    table = Table(title=title, title_justify="left", show_edge=False)
    table.add_column("Preset", style="cyan")
    table.add_column("Limit", justify="right")
    table.add_column("Window", justify="right")

    for name, preset in RATE_LIMITS.items():
        table.add_row(name, str(preset.limit), f"{preset.window_seconds}s")
    return table


def build_config_table(config: Config) -> Table:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()

    mode = "[green]production[/green]" if config.server.production else "[yellow]development[/yellow]"
    table.add_row("Mode", mode)
    table.add_row("Audit", f"{config.audit.format} -> {config.audit.logger_name}")
    table.add_row("Uploads", f"max {config.uploads.max_file_size // (1024 * 1024)}MB")
    table.add_row("Types", ", ".join(config.uploads.allowed_content_types))
    table.add_row("Sweep", f"every {config.rate_limit.sweep_interval_seconds}s")
    return table


def display_config(config: Config) -> None:
    """Print the effective configuration."""
    console.print(build_config_table(config))
    console.print()
    console.print(build_rate_limit_table(config))


def display_startup_screen(url: str, config: Config) -> None:
    """Display the startup screen.

    Args:
        url: Address the server listens on.
        config: Effective configuration.
    """
    logo_colored = _apply_gradient(
        LOGO.split("\n"),
        ["bold bright_yellow", "yellow"],
    )

    left_lines = [
        *logo_colored,
        f"[dim]v{__version__}[/dim]",
        "",
        f"[bold cyan]{url}[/bold cyan]",
        "[dim]Ctrl+C to stop[/dim]",
    ]

    layout = Table.grid(padding=(0, 4))
    layout.add_column(justify="left", vertical="middle")
    layout.add_column(justify="left", vertical="middle")
    layout.add_row("\n".join(left_lines), build_config_table(config))

    console.print()
    console.print(Align.center(layout))
    console.print()
    console.print(Align.center(build_rate_limit_table(config)))
    console.print()
