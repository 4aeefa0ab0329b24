"""Tests for table of contents grouping and reading statistics."""

from conftest import make_chapter, make_summaries


def _chapters(count=8, dividers=(1, 5)):
    return [make_chapter(s) for s in make_summaries(count, dividers)]


class TestContentChapters:
    def test_skips_dividers(self):
        from reader.toc import content_chapters
        entries = content_chapters(_chapters())
        assert [e.index for e in entries] == [1, 2, 3, 5, 6, 7]
        assert [e.number for e in entries] == [1, 2, 3, 1, 2, 3]


class TestVolumeGroups:
    def test_dividers_name_volumes(self):
        from reader.toc import volume_groups
        groups = volume_groups(_chapters())
        assert [(g.volume, g.title, len(g.chapters)) for g in groups] == [
            (1, "第1卷", 3),
            (2, "第2卷", 3),
        ]

    def test_missing_volume_defaults_to_one(self):
        from models.chapter import ChapterSummary
        from reader.toc import volume_groups
        chapters = [make_chapter(ChapterSummary(chapter_number=n, title=f"第{n}章")) for n in (1, 2)]
        groups = volume_groups(chapters)
        assert len(groups) == 1
        assert groups[0].volume == 1
        assert groups[0].title == ""


class TestDisplayPosition:
    def test_position_among_readable(self):
        from reader.toc import display_position
        assert display_position(_chapters(), 6) == (4, 6)

    def test_divider_falls_back_to_raw_index(self):
        from reader.toc import display_position
        assert display_position(_chapters(), 4) == (4, 6)

    def test_empty_list(self):
        from reader.toc import display_position
        assert display_position([], 0) == (0, 1)


class TestReadingStats:
    def test_counts_up_to_persisted_chapter(self):
        from models.progress import ReadingProgress
        from reader.toc import reading_stats
        stats = reading_stats(_chapters(), ReadingProgress(current_chapter=5))
        assert (stats.read_count, stats.total, stats.percent) == (4, 6, 67)

    def test_no_progress(self):
        from reader.toc import reading_stats
        stats = reading_stats(_chapters(), None)
        assert (stats.read_count, stats.total, stats.percent) == (0, 6, 0)
