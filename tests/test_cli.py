"""Tests for the click command line interface."""

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_env(monkeypatch, settings, mock_api):
    """Point the CLI at test settings and the mocked backend."""
    import cli.main as main
    from reader.app import ReaderApp

    monkeypatch.setattr(main, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(main, "get_settings", lambda: settings)
    monkeypatch.setattr(main, "ReaderApp", lambda **kwargs: ReaderApp(api=mock_api, **kwargs))
    return main


class TestCommands:
    def test_help_lists_commands(self, cli_env):
        result = CliRunner().invoke(cli_env.cli, ["--help"])
        assert result.exit_code == 0
        for command in ("books", "add", "delete", "toc", "read", "search", "download", "prefs"):
            assert command in result.output

    def test_prefs_update(self, cli_env, settings):
        from config.preferences import PreferenceStore
        result = CliRunner().invoke(cli_env.cli, ["prefs", "--font-size", "20", "--theme", "light"])
        assert result.exit_code == 0
        prefs = PreferenceStore(settings.preferences_path).load()
        assert prefs.font_size == 20
        assert prefs.theme == "light"

    def test_prefs_rejects_invalid_font_size(self, cli_env):
        result = CliRunner().invoke(cli_env.cli, ["prefs", "--font-size", "2"])
        assert result.exit_code == 1

    def test_search_rate_limited(self, cli_env, mock_api):
        from config.exceptions import ApiError
        mock_api.search.side_effect = ApiError("搜索过于频繁")
        result = CliRunner().invoke(cli_env.cli, ["search", "斗破"])
        assert result.exit_code == 1
        assert "搜尋過於頻繁" in result.output

    def test_add_without_title_fails_validation(self, cli_env, mock_api):
        result = CliRunner().invoke(cli_env.cli, ["add", "/books/novel.epub", "--title", " "])
        assert result.exit_code == 1
        mock_api.create_book.assert_not_awaited()

    def test_books_lists_library(self, cli_env, mock_api):
        from models.book import Book
        mock_api.list_books.return_value = [Book(id="b1", title="斗破蒼穹", author="天蠶土豆")]
        result = CliRunner().invoke(cli_env.cli, ["books", "-s", "title"])
        assert result.exit_code == 0
        assert "斗破蒼穹" in result.output
