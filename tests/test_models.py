"""Tests for data models, enums, timestamps and the response envelope."""

import pytest
from datetime import datetime, timezone


class TestEnums:
    def test_file_format_values(self):
        from models.enums import FileFormat
        assert FileFormat("md") is FileFormat.MARKDOWN
        assert FileFormat.EPUB.value == "epub"

    def test_job_status_terminal(self):
        from models.enums import JobStatus
        assert JobStatus.SUCCESS.is_terminal
        assert JobStatus.ERROR.is_terminal
        assert not JobStatus.PENDING.is_terminal
        assert not JobStatus.RUNNING.is_terminal


class TestParseTimestamp:
    def test_utc_suffix(self):
        from models.timestamps import parse_timestamp
        ts = parse_timestamp("2024-05-01T12:30:00Z")
        assert ts == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    def test_nanosecond_fraction_truncated(self):
        from models.timestamps import parse_timestamp
        ts = parse_timestamp("2024-05-01T12:30:00.123456789+08:00")
        assert ts.microsecond == 123456
        assert ts.utcoffset().total_seconds() == 8 * 3600

    def test_short_fraction_padded(self):
        from models.timestamps import parse_timestamp
        assert parse_timestamp("2024-05-01T12:30:00.5Z").microsecond == 500000

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_missing_or_invalid_returns_none(self, value):
        from models.timestamps import parse_timestamp
        assert parse_timestamp(value) is None


class TestBook:
    def test_from_api(self):
        from models.book import Book
        from models.enums import FileFormat
        book = Book.from_api({
            "id": 7,
            "title": "斗破蒼穹",
            "author": "天蠶土豆",
            "file_format": "web",
            "file_size": 2048,
            "created_at": "2024-01-02T03:04:05Z",
        })
        assert book.id == "7"
        assert book.file_format is FileFormat.WEB
        assert book.created_at.year == 2024
        assert book.updated_at is None

    def test_create_request_payload_omits_empty_optionals(self):
        from models.book import CreateBookRequest
        from models.enums import FileFormat
        payload = CreateBookRequest(title="A", file_path="/tmp/a.epub", file_format=FileFormat.EPUB).to_payload()
        assert payload == {"title": "A", "file_path": "/tmp/a.epub", "file_format": "epub"}

    def test_create_request_payload_with_optionals(self):
        from models.book import CreateBookRequest
        payload = CreateBookRequest(title="A", file_path="a.txt", author="B", tag_ids=["t1"]).to_payload()
        assert payload["author"] == "B"
        assert payload["tag_ids"] == ["t1"]


class TestChapter:
    def test_divider_by_volume_chapter_number(self):
        from models.chapter import Chapter
        ch = Chapter.from_api({"chapter_number": 1, "volume_number": 1, "volume_chapter_number": 0, "title": "第一卷"})
        assert ch.is_divider
        assert ch.content == ""
        assert not ch.has_content

    def test_divider_by_empty_body_inside_volume(self):
        from models.chapter import Chapter
        ch = Chapter.from_api({"chapter_number": 5, "volume_number": 2, "word_count": 0, "content": ""})
        assert ch.is_divider

    def test_content_chapter(self):
        from models.chapter import Chapter
        ch = Chapter.from_api({"chapter_number": 2, "volume_number": 1, "volume_chapter_number": 1,
                               "word_count": 3, "content": "正文。"})
        assert not ch.is_divider
        assert ch.has_content
        assert ch.content == "正文。"

    def test_placeholder_has_no_content(self):
        from models.chapter import Chapter, ChapterSummary
        ch = Chapter.placeholder(ChapterSummary(chapter_number=3, volume_chapter_number=2))
        assert not ch.is_divider
        assert ch.content is None
        assert not ch.has_content


class TestProgress:
    def test_from_api_clamps_negative_position(self):
        from models.progress import ReadingProgress
        p = ReadingProgress.from_api({"book_id": "b1", "current_chapter": 4, "current_position": -20})
        assert p.current_position == 0
        assert p.current_chapter == 4

    def test_default_record_is_chapter_zero(self):
        from models.progress import ReadingProgress
        p = ReadingProgress.from_api({"book_id": "b1"})
        assert p.current_chapter == 0
        assert p.last_read_at is None

    def test_update_payload(self):
        from models.progress import ProgressUpdate
        payload = ProgressUpdate(3, 120, 42.5).to_payload()
        assert payload == {"current_chapter": 3, "current_position": 120, "progress_percentage": 42.5}


class TestImportJob:
    def test_percent_floors(self):
        from models.job import ImportJob
        assert ImportJob(total=3, done=1).percent == 33

    def test_percent_zero_total(self):
        from models.job import ImportJob
        assert ImportJob(total=0, done=5).percent == 0

    def test_percent_capped(self):
        from models.job import ImportJob
        assert ImportJob(total=10, done=12).percent == 100

    def test_from_api(self):
        from models.job import ImportJob
        from models.enums import JobStatus
        job = ImportJob.from_api({"id": "j1", "status": "running", "total": 200, "done": 50})
        assert job.status is JobStatus.RUNNING
        assert job.percent == 25

    def test_search_result_payload(self):
        from models.job import SearchResult
        item = SearchResult(title="A", url="https://x/1", author="B")
        assert item.to_payload() == {"title": "A", "url": "https://x/1", "author": "B"}


class TestEnvelope:
    def test_success(self):
        from tools.envelope import Success, parse_envelope
        assert parse_envelope({"success": True, "data": [1]}) == Success([1])

    def test_failure_uses_error(self):
        from tools.envelope import Failure, parse_envelope
        assert parse_envelope({"success": False, "error": "nope"}) == Failure("nope")

    def test_failure_without_message(self):
        from tools.envelope import Failure, parse_envelope, UNKNOWN_ERROR
        assert parse_envelope({"success": False}) == Failure(UNKNOWN_ERROR)

    def test_truthy_non_bool_is_not_success(self):
        from tools.envelope import Failure, parse_envelope
        assert isinstance(parse_envelope({"success": "yes", "data": 1}), Failure)

    def test_non_dict_body(self):
        from tools.envelope import Failure, parse_envelope
        assert isinstance(parse_envelope([1, 2]), Failure)
