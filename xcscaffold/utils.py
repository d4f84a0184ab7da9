"""Shared utility functions for xcscaffold.

Provides Rich-based console reporting, file hashing, and small formatting
helpers used by the scaffolder and the CLI.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

console = Console()


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


def compute_file_hash(path: str | Path, algorithm: str = "sha256") -> str:
    """Return the hex digest of a file's bytes.

    Args:
        path: File to hash.
        algorithm: Any algorithm accepted by :func:`hashlib.new`.
    """
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


def build_path_tree(root_label: str, paths: list[str]) -> Tree:
    """Build a Rich ``Tree`` from POSIX relative paths.

    Paths are expected parents-first (as produced by the template store);
    intermediate directories missing from *paths* are created on demand.
    """
    tree = Tree(f"[bold]{escape(root_label)}[/bold]")
    nodes: dict[str, Tree] = {"": tree}
    for rel in paths:
        parts = rel.split("/")
        for depth in range(1, len(parts) + 1):
            key = "/".join(parts[:depth])
            if key in nodes:
                continue
            parent = nodes["/".join(parts[: depth - 1])]
            nodes[key] = parent.add(escape(parts[depth - 1]))
    return tree


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_step(message: str) -> None:
    """Print a dimmed progress line (used in verbose mode)."""
    console.print(f"[dim]{escape(message)}[/dim]")
