"""CLI entry point — novelreader 小說閱讀器。

用法：
  novelreader books             列出書架
  novelreader read <book_id>    進入閱讀模式
  novelreader search <關鍵字>   搜尋網路小說
  novelreader download <關鍵字> 搜尋並下載到書架
  novelreader --help            查看所有命令
"""

import asyncio
import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import PurePath

# Ensure UTF-8 output on Windows to avoid encoding errors with Rich
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")

import click
from pydantic import ValidationError as PydanticValidationError
from rich.panel import Panel

from cli.theme import (
    get_console,
    app_header,
    book_table,
    command_panel,
    search_table,
    success_panel,
    toc_tree,
)
from config.exceptions import InvalidConfigError, ReaderError
from config.logging_config import setup_logging
from config.settings import Settings, get_settings
from crawler.callbacks import RichProgressCallback
from models.book import CreateBookRequest
from models.enums import JobStatus, LibrarySort
from reader.app import ReaderApp
from reader.library import detect_format
from reader.session import clamp_index
from reader.toc import display_position, reading_stats, volume_groups
from reader.viewport import LineViewport

console = get_console()
logger = logging.getLogger(__name__)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except PydanticValidationError as e:
        raise InvalidConfigError("Invalid configuration", {"errors": e.error_count()}) from e


def _init_logging(verbose: bool):
    """Configure logging based on verbosity. Console logging stays off so it cannot garble the pager."""
    level = logging.DEBUG if verbose else logging.INFO
    try:
        settings = _load_settings()
    except InvalidConfigError as e:
        console.print(f"[error]設定檔錯誤：{e}[/]")
        sys.exit(1)
    setup_logging(level=level, log_dir=settings.log_dir, console_enabled=False)


def _run(coro):
    """Run ``coro`` to completion, turning reader errors into exit codes."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[warning]已中斷[/]")
        sys.exit(130)
    except ReaderError as e:
        logger.error("Command failed: %s", e)
        console.print(f"[error]{getattr(e, 'user_message', None) or f'錯誤：{e}'}[/]")
        sys.exit(1)


@asynccontextmanager
async def _open_app(**kwargs):
    app = ReaderApp(settings=_load_settings(), **kwargs)
    try:
        yield app
    finally:
        await app.aclose()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """novelreader — 終端機小說閱讀器

    \b
    書架與閱讀：
      novelreader books -s last_read
      novelreader read 3
    \b
    網路搜尋與下載：
      novelreader search 斗破蒼穹
      novelreader download 斗破蒼穹 --pick 1
    """
    _init_logging(verbose)


# ---------------------------------------------------------------------------
# library commands
# ---------------------------------------------------------------------------

_SORT_CHOICES = [s.value for s in LibrarySort]


@cli.command()
@click.option("--query", "-q", default="", help="依書名或作者篩選")
@click.option("--sort", "-s", "sort", type=click.Choice(_SORT_CHOICES), default=None, help="排序方式（預設沿用上次）")
def books(query, sort):
    """列出書架上的書籍與閱讀進度。"""

    async def _books():
        async with _open_app() as app:
            order = LibrarySort(sort or app.preferences.library_sort)
            if sort:
                app.save_preferences(library_sort=sort)
            await app.library.refresh()
            overviews = app.library.browse(query, order)
            console.print(app_header())
            console.print(book_table(overviews))
            console.print(f"[muted]共 {len(overviews)} 本[/]")

    _run(_books())


@cli.command()
@click.argument("file_path")
@click.option("--title", "-t", default=None, help="書名（預設取檔名）")
@click.option("--author", "-a", default="", help="作者")
@click.option("--description", "-d", default="", help="簡介")
def add(file_path, title, author, description):
    """把本機的 txt / md / epub 檔案加入書架。"""
    title = title if title is not None else PurePath(file_path).stem
    request = CreateBookRequest(
        title=title,
        file_path=file_path,
        file_format=detect_format(file_path),
        author=author,
        description=description,
    )
    console.print(command_panel("新增書籍", {
        "書名": request.title or "-",
        "檔案": request.file_path or "-",
        "格式": request.file_format.value,
    }))

    async def _add():
        async with _open_app() as app:
            book = await app.add_book(request)
            console.print(success_panel("已加入書架", f"《{book.title}》 [muted](ID: {book.id})[/]"))

    _run(_add())


@cli.command()
@click.argument("book_id")
@click.option("--force", "-f", is_flag=True, help="跳過確認直接刪除")
def delete(book_id, force):
    """從書架刪除書籍。"""

    async def _delete():
        async with _open_app() as app:
            book = await app.api.get_book(book_id)
            console.print(Panel(
                f"  [stat.label]書名:[/] [bold]{book.title}[/] [muted](ID: {book.id})[/]",
                title="[error]刪除書籍[/]",
                border_style="red",
                padding=(0, 2),
            ))
            if not force and not click.confirm("確認刪除？此操作無法復原", default=False):
                console.print("[warning]已取消[/]")
                return
            await app.delete_book(book_id)
            console.print(f"\n[success]已刪除《{book.title}》[/]")

    _run(_delete())


@cli.command()
@click.argument("book_id")
@click.option("--all", "show_all", is_flag=True, help="顯示每卷全部章節")
def toc(book_id, show_all):
    """顯示書籍目錄與閱讀統計。"""

    async def _toc():
        async with _open_app() as app:
            book = await app.api.get_book(book_id)
            if not await app.open_book(book_id):
                return
            # Listing the contents is not reading
            app.sync.discard_pending()
            session = app.session
            stats = reading_stats(session.chapters, session.progress)
            groups = volume_groups(session.chapters)
            limit = max((len(g.chapters) for g in groups), default=0) if show_all else 20
            console.print(toc_tree(book.title, groups, session.current_index, limit=limit))
            console.print(
                f"[stat.label]已讀:[/] [stat.value]{stats.read_count}/{stats.total}[/] "
                f"[muted]({stats.percent}%)[/]"
            )

    _run(_toc())


# ---------------------------------------------------------------------------
# read command
# ---------------------------------------------------------------------------

_PAGER_HELP = "j/k 捲動一行  空白/b 翻頁  n/p 下一章/上一章  q 離開"


def _draw(app: ReaderApp, title: str) -> None:
    viewport = app.viewport
    session = app.session
    position, total = display_position(session.chapters, session.current_index)
    percent = app.sync.capture().progress_percentage

    console.clear()
    console.print(app_header(title))
    for line in viewport.visible_lines():
        console.print(line, markup=False, highlight=False)
    console.print(
        f"[muted]{position + 1}/{total} 章  {percent:.0f}%  |  {_PAGER_HELP}[/]",
    )


async def _pager(app: ReaderApp, book_id: str, chapter) -> None:
    book = await app.api.get_book(book_id)
    if not await app.open_book(book_id):
        return
    if chapter is not None:
        app.session.set_current_chapter(clamp_index(chapter - 1, len(app.session.chapters)))

    # Redraw when the chapter being shown finishes loading
    def _on_loaded(index: int) -> None:
        if index == app.session.current_index:
            _draw(app, book.title)

    app.session.cache.add_listener(_on_loaded)
    viewport = app.viewport
    try:
        while True:
            # Let pending restores run before drawing
            await asyncio.sleep(0)
            _draw(app, book.title)
            key = await asyncio.to_thread(click.getchar)
            if key in ("q", "Q"):
                break
            if key == "j":
                moved = viewport.scroll_by(1)
            elif key == "k":
                moved = viewport.scroll_by(-1)
            elif key == " ":
                moved = viewport.scroll_by(viewport.client_height - 1)
            elif key == "b":
                moved = viewport.scroll_by(-(viewport.client_height - 1))
            elif key == "n":
                app.session.next()
                moved = False
            elif key == "p":
                app.session.previous()
                moved = False
            else:
                moved = False
            if moved:
                app.sync.on_scroll()
    finally:
        app.session.cache.remove_listener(_on_loaded)
        console.clear()


@cli.command()
@click.argument("book_id")
@click.option("--chapter", "-c", type=int, default=None, help="從第幾章開始（預設接續上次進度）")
def read(book_id, chapter):
    """進入閱讀模式，自動保存並還原閱讀進度。"""
    width, height = console.size
    viewport = LineViewport(page_height=max(5, height - 3))
    _run(_run_pager(book_id, chapter, viewport, max(20, width - 2)))


async def _run_pager(book_id, chapter, viewport, line_width):
    async with _open_app(viewport=viewport, line_width=line_width) as app:
        await _pager(app, book_id, chapter)


# ---------------------------------------------------------------------------
# crawler commands
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("query")
def search(query):
    """搜尋網路小說。"""

    async def _search():
        async with _open_app() as app:
            results = await app.imports.search(query)
            if not results:
                console.print("[warning]找不到相關小說[/]")
                return
            console.print(search_table(results))

    _run(_search())


@cli.command()
@click.argument("query")
@click.option("--pick", "-p", type=int, default=None, help="下載第幾筆搜尋結果（預設詢問）")
def download(query, pick):
    """搜尋網路小說並下載到書架。"""

    async def _download() -> bool:
        callback = RichProgressCallback(console=console)
        async with _open_app(callback=callback) as app:
            results = await app.imports.search(query)
            if not results:
                console.print("[warning]找不到相關小說[/]")
                return False
            console.print(search_table(results))

            choice = pick
            if choice is None:
                choice = click.prompt("要下載哪一本", type=click.IntRange(1, len(results)), default=1)
            if not 1 <= choice <= len(results):
                console.print(f"[error]沒有第 {choice} 筆結果[/]")
                return False
            item = results[choice - 1]

            callback.start()
            try:
                task = app.imports.start_import(item)
                job = await task if task is not None else None
            finally:
                callback.stop()

            if job is None or job.status != JobStatus.SUCCESS:
                return False
            console.print(success_panel("下載完成", f"《{item.title}》下載成功！ [muted](ID: {job.book_id or '?'})[/]"))
            return True

    if not _run(_download()):
        sys.exit(1)


# ---------------------------------------------------------------------------
# prefs command
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--theme", type=click.Choice(["light", "dark"]), default=None, help="介面主題")
@click.option("--font-size", type=int, default=None, help="字體大小")
@click.option("--line-spacing", type=float, default=None, help="行距")
@click.option("--language", "content_language", type=click.Choice(["zh-Hant", "zh-Hans"]), default=None, help="內容語言")
@click.option("--reading-theme", type=click.Choice(["day", "night", "sepia"]), default=None, help="閱讀背景")
def prefs(theme, font_size, line_spacing, content_language, reading_theme):
    """查看或修改閱讀偏好設定。"""
    from config.preferences import PreferenceStore

    settings = _load_settings()
    store = PreferenceStore(settings.preferences_path)
    changes = {
        k: v for k, v in {
            "theme": theme,
            "font_size": font_size,
            "line_spacing": line_spacing,
            "content_language": content_language,
            "reading_theme": reading_theme,
        }.items()
        if v is not None
    }
    try:
        current = store.update(**changes) if changes else store.load()
    except PydanticValidationError as e:
        console.print(f"[error]設定值無效：{e.errors()[0]['msg']}[/]")
        sys.exit(1)

    title = "偏好設定已更新" if changes else "偏好設定"
    console.print(command_panel(title, {k: str(v) for k, v in current.model_dump().items()}))


if __name__ == "__main__":
    cli()
