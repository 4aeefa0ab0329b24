"""Tests for library listing, filtering, sorting and book management."""

from datetime import datetime, timezone

import pytest

from conftest import make_summaries


def _book(book_id, title, author="", created_day=1):
    from models.book import Book
    return Book(id=book_id, title=title, author=author,
                created_at=datetime(2024, 1, created_day, tzinfo=timezone.utc))


def _progress(book_id, day=None):
    from models.progress import ReadingProgress
    last_read = datetime(2024, 2, day, tzinfo=timezone.utc) if day else None
    return ReadingProgress(book_id=book_id, last_read_at=last_read)


class TestDetectFormat:
    @pytest.mark.parametrize("name,expected", [
        ("novel.md", "md"),
        ("NOTES.MARKDOWN", "md"),
        ("book.epub", "epub"),
        ("book.txt", "txt"),
        ("README", "txt"),
        ("archive.tar.gz", "txt"),
    ])
    def test_extensions(self, name, expected):
        from reader.library import detect_format
        assert detect_format(name).value == expected


class TestValidation:
    @pytest.mark.asyncio
    async def test_missing_title_blocks_submission(self, mock_api):
        from config.exceptions import ValidationError
        from models.book import CreateBookRequest
        from reader.library import Library
        library = Library(mock_api)
        with pytest.raises(ValidationError, match="required") as exc_info:
            await library.add_book(CreateBookRequest(title="  ", file_path="/tmp/a.txt"))
        assert exc_info.value.details == {"missing": "title"}
        mock_api.create_book.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_file_path(self, mock_api):
        from config.exceptions import ValidationError
        from models.book import CreateBookRequest
        from reader.library import Library
        with pytest.raises(ValidationError):
            await Library(mock_api).add_book(CreateBookRequest(title="A", file_path=""))

    @pytest.mark.asyncio
    async def test_add_book(self, mock_api):
        from models.book import CreateBookRequest
        from reader.library import Library
        mock_api.create_book.return_value = _book("9", "A")
        library = Library(mock_api)
        book = await library.add_book(CreateBookRequest(title="A", file_path="/tmp/a.txt"))
        assert book.id == "9"
        assert library.books == [book]
        assert "9" in library.overviews


class TestOverviews:
    @pytest.mark.asyncio
    async def test_refresh_loads_progress_and_chapter_count(self, mock_api):
        from reader.library import Library
        mock_api.list_books.return_value = [_book("b1", "A")]
        mock_api.get_progress.return_value = _progress("b1", day=3)
        mock_api.get_book_chapters.return_value = make_summaries(12)

        library = Library(mock_api)
        await library.refresh()
        overview = library.overviews["b1"]
        assert overview.chapter_count == 12
        assert overview.last_read_at.day == 3

    @pytest.mark.asyncio
    async def test_failed_overview_degrades(self, mock_api, caplog):
        from config.exceptions import NetworkError
        from reader.library import Library
        mock_api.list_books.return_value = [_book("b1", "A")]
        mock_api.get_progress.side_effect = NetworkError("GET timed out")

        library = Library(mock_api)
        await library.refresh()
        overview = library.overviews["b1"]
        assert overview.progress is None
        assert overview.chapter_count == 0
        assert "Could not load overview for book b1" in caplog.text

    @pytest.mark.asyncio
    async def test_remove_book(self, mock_api):
        from reader.library import Library
        mock_api.list_books.return_value = [_book("b1", "A"), _book("b2", "B")]
        library = Library(mock_api)
        await library.refresh()
        await library.remove_book("b1")
        mock_api.delete_book.assert_awaited_once_with("b1")
        assert [b.id for b in library.books] == ["b2"]
        assert "b1" not in library.overviews


class TestBrowse:
    @pytest.fixture
    def library(self, mock_api):
        from reader.library import BookOverview, Library
        library = Library(mock_api)
        books = [
            _book("1", "Zebra Tales", "Amy", created_day=1),
            _book("2", "apple story", "Bob", created_day=3),
            _book("3", "Middle Kingdom", "amy lee", created_day=2),
        ]
        library.books = books
        library.overviews = {
            "1": BookOverview(book=books[0], progress=_progress("1", day=5)),
            "2": BookOverview(book=books[1], progress=_progress("2")),
            "3": BookOverview(book=books[2], progress=_progress("3", day=9)),
        }
        return library

    def test_recent_sort(self, library):
        from models.enums import LibrarySort
        assert [o.book.id for o in library.browse(sort=LibrarySort.RECENT)] == ["2", "3", "1"]

    def test_title_sort_case_insensitive(self, library):
        from models.enums import LibrarySort
        assert [o.book.id for o in library.browse(sort=LibrarySort.TITLE)] == ["2", "3", "1"]

    def test_last_read_sort_puts_unread_last(self, library):
        from models.enums import LibrarySort
        assert [o.book.id for o in library.browse(sort=LibrarySort.LAST_READ)] == ["3", "1", "2"]

    def test_filter_matches_title_or_author(self, library):
        assert {o.book.id for o in library.browse("AMY")} == {"1", "3"}
        assert [o.book.id for o in library.browse("apple")] == ["2"]
        assert library.browse("nothing") == []
