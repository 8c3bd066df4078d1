from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def datetime_from_ns(value: int) -> dt.datetime:
    """Convert epoch nanoseconds to a UTC datetime, truncated to microseconds."""
    return EPOCH + dt.timedelta(microseconds=value // 1000)


def datetime_to_ns(value: dt.datetime) -> int:
    if value.tzinfo is None:
        value = value.astimezone()
    delta = value - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000


@dataclass(frozen=True, slots=True)
class InputFile:
    path: Path
    file_number: int
    chapter_number: int

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.file_number, self.chapter_number)


@dataclass(frozen=True, slots=True)
class TimeAggregate:
    """Earliest creation and latest modification across a merge's inputs.

    Datetimes stop at microseconds. The ``*_ns`` fields hold the exact
    nanosecond values when the aggregate was read from the filesystem, and
    ``creation_ns`` / ``modification_ns`` prefer them over the datetimes.
    """

    earliest_creation: dt.datetime
    latest_modification: dt.datetime
    earliest_creation_ns: Optional[int] = None
    latest_modification_ns: Optional[int] = None

    @classmethod
    def from_ns(cls, creation_ns: int, modification_ns: int) -> "TimeAggregate":
        return cls(
            earliest_creation=datetime_from_ns(creation_ns),
            latest_modification=datetime_from_ns(modification_ns),
            earliest_creation_ns=creation_ns,
            latest_modification_ns=modification_ns,
        )

    @property
    def creation_ns(self) -> int:
        if self.earliest_creation_ns is not None:
            return self.earliest_creation_ns
        return datetime_to_ns(self.earliest_creation)

    @property
    def modification_ns(self) -> int:
        if self.latest_modification_ns is not None:
            return self.latest_modification_ns
        return datetime_to_ns(self.latest_modification)


@dataclass(frozen=True, slots=True)
class MergePlan:
    """Input files in playback order: session number first, then chapter."""

    files: Tuple[InputFile, ...] = field(default_factory=tuple)

    @classmethod
    def from_files(cls, files: Iterable[InputFile]) -> "MergePlan":
        return cls(files=tuple(sorted(files, key=lambda item: item.sort_key)))

    @property
    def paths(self) -> list[Path]:
        return [item.path for item in self.files]

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[InputFile]:
        return iter(self.files)


@dataclass(frozen=True, slots=True)
class ToolPaths:
    ffmpeg: str
    setfile: str


class MergeState(str, Enum):
    VALIDATING = "validating"
    ORDERING = "ordering"
    CONCATENATING = "concatenating"
    STAMPING_CREATION = "stamping-creation"
    STAMPING_TIMES = "stamping-times"
    DONE = "done"
    FAILED = "failed"
