"""Unified Rich theme and reusable UI helper functions for the CLI."""

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme
from rich.tree import Tree

READER_THEME = Theme({
    "app.title": "bold",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "accent": "cyan",
    "stat.label": "dim",
    "stat.value": "bold",
    "chapter.num": "blue",
    "chapter.current": "bold reverse",
    "book.title": "bold cyan",
})


def get_console() -> Console:
    """Return a Console instance with the reader theme applied."""
    return Console(theme=READER_THEME)


def app_header(title: str = "novelreader") -> Rule:
    """Return a Rule element for the application header banner."""
    return Rule(title=f"[bold]{title}[/]", style="dim")


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Return a Panel displaying command parameters.

    Args:
        title: Panel title (e.g. "新增書籍").
        fields: Ordered dict of label -> value pairs.
    """
    lines = []
    for label, value in fields.items():
        lines.append(f"  [stat.label]{label}:[/] [stat.value]{value}[/]")
    body = "\n".join(lines)
    return Panel(body, title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def success_panel(title: str, body: str) -> Panel:
    """Return a green-bordered Panel for success results."""
    return Panel(body, title=f"[success]{title}[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))


def book_table(overviews: list) -> Table:
    """Build the library listing.

    Args:
        overviews: BookOverview objects in display order.
    """
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("ID", style="muted", no_wrap=True)
    table.add_column("書名", style="book.title")
    table.add_column("作者")
    table.add_column("格式", style="muted")
    table.add_column("進度", justify="right")
    table.add_column("最後閱讀", style="muted")

    for ov in overviews:
        book = ov.book
        percent = f"{ov.progress.progress_percentage:.0f}%" if ov.progress else "-"
        last_read = ov.last_read_at.strftime("%Y-%m-%d %H:%M") if ov.last_read_at else "-"
        table.add_row(book.id, book.title, book.author or "", book.file_format.value, percent, last_read)

    if not overviews:
        table.add_row("[muted]書架是空的[/]", "", "", "", "", "")
    return table


def search_table(results: list) -> Table:
    """Build a numbered table of remote search results."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("#", style="chapter.num", justify="right")
    table.add_column("書名", style="book.title")
    table.add_column("作者")
    table.add_column("最新章節", style="muted")

    for i, item in enumerate(results, 1):
        latest = (item.latest[:30] + "...") if len(item.latest) > 30 else item.latest
        table.add_row(str(i), item.title, item.author, latest)
    return table


def toc_tree(title: str, groups: list, current_index: Optional[int] = None, limit: int = 20) -> Tree:
    """Build a Rich Tree showing the volume/chapter structure.

    Args:
        title: Book title for the tree root.
        groups: VolumeGroup objects from reader.toc.volume_groups.
        current_index: Chapter index to highlight.
        limit: Chapters shown per volume before eliding.
    """
    tree = Tree(f"[bold]{title}[/]")
    for group in groups:
        label = group.title or f"第{group.volume}卷"
        branch = tree.add(f"[bold cyan]{label}[/]")
        for entry in group.chapters[:limit]:
            style = "chapter.current" if entry.index == current_index else "chapter.num"
            branch.add(f"[{style}]第{entry.number}章[/] {entry.title}")
        if len(group.chapters) > limit:
            branch.add(f"[muted]... (共{len(group.chapters)}章)[/]")
    return tree
