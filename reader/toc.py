"""Table of contents helpers: volume grouping and reading statistics."""

from dataclasses import dataclass, field
from typing import Optional

from models.chapter import Chapter
from models.progress import ReadingProgress


@dataclass
class TocEntry:
    index: int  # position in the full chapter list
    title: str
    number: int  # number shown to the reader, per volume when known


@dataclass
class VolumeGroup:
    volume: int
    title: str = ""
    chapters: list[TocEntry] = field(default_factory=list)


@dataclass
class ReadingStats:
    read_count: int
    total: int
    percent: int


def _display_number(chapter: Chapter) -> int:
    if chapter.summary.volume_chapter_number is not None:
        return chapter.summary.volume_chapter_number
    return chapter.chapter_number


def content_chapters(chapters: list[Chapter]) -> list[TocEntry]:
    """Every readable chapter in order, skipping volume dividers."""
    return [
        TocEntry(index=i, title=ch.title, number=_display_number(ch))
        for i, ch in enumerate(chapters)
        if not ch.is_divider
    ]


def volume_groups(chapters: list[Chapter]) -> list[VolumeGroup]:
    """Group readable chapters by volume; divider pages supply the volume titles."""
    titles: dict[int, str] = {}
    groups: dict[int, VolumeGroup] = {}
    for i, ch in enumerate(chapters):
        volume = ch.summary.volume_number or 1
        if ch.is_divider:
            titles[volume] = ch.title
            continue
        group = groups.setdefault(volume, VolumeGroup(volume=volume))
        group.chapters.append(TocEntry(index=i, title=ch.title, number=_display_number(ch)))

    for volume, group in groups.items():
        group.title = titles.get(volume, "")
    return sorted(groups.values(), key=lambda g: g.volume)


def display_position(chapters: list[Chapter], index: int) -> tuple[int, int]:
    """Return (position among readable chapters, readable chapter count) for ``index``.

    Falls back to the raw index when ``index`` is not a readable chapter.
    """
    readable = content_chapters(chapters)
    position = next((n for n, entry in enumerate(readable) if entry.index == index), index)
    total = len(readable) or len(chapters) or 1
    return position, total


def reading_stats(chapters: list[Chapter], progress: Optional[ReadingProgress]) -> ReadingStats:
    """How many readable chapters lie at or before the persisted chapter."""
    readable = content_chapters(chapters)
    total = len(readable)
    read_count = 0
    if progress is not None:
        for n, entry in enumerate(readable):
            if entry.index == progress.current_chapter:
                read_count = n + 1
                break
    percent = round(read_count / total * 100) if total else 0
    return ReadingStats(read_count=read_count, total=total, percent=percent)
