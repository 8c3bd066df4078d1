"""Aggregate creation and modification times across a set of input files.

The merged output should claim the recording's true start and end, so the
earliest birth time and the latest modification time among the chapters are
carried over to it.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Optional, Tuple

from .errors import MissingCreationTimeError, StatFailureError
from .logging_utils import render_fields_block
from .models import EPOCH, TimeAggregate, datetime_from_ns, datetime_to_ns

LOGGER = logging.getLogger(__name__)

# Modification times are reduced with a running maximum seeded here rather
# than at the first file's value.
ZERO_TIME = dt.datetime.min.replace(tzinfo=dt.timezone.utc)
ZERO_TIME_NS = datetime_to_ns(ZERO_TIME)

__all__ = [
    "EPOCH",
    "ZERO_TIME",
    "ZERO_TIME_NS",
    "aggregate_file_times",
    "datetime_from_ns",
    "datetime_to_ns",
    "read_file_times",
]


def _birth_time(stat_result: os.stat_result) -> Optional[int]:
    birth_ns = getattr(stat_result, "st_birthtime_ns", None)
    if birth_ns is not None:
        return birth_ns
    birth = getattr(stat_result, "st_birthtime", None)
    if birth is None:
        return None
    return int(birth * 1_000_000_000)


def read_file_times(path: Path) -> Tuple[Optional[int], int]:
    """Return ``(birth_time_ns, modification_time_ns)`` for ``path``.

    The birth time is ``None`` on filesystems and platforms that do not
    expose one.
    """
    try:
        stat_result = os.stat(path)
    except OSError as exc:
        raise StatFailureError(path, exc) from exc
    return _birth_time(stat_result), stat_result.st_mtime_ns


def aggregate_file_times(paths: Sequence[Path | str]) -> TimeAggregate:
    """Reduce the inputs to (earliest creation, latest modification).

    Raises:
        StatFailureError: if any path cannot be stat'd.
        MissingCreationTimeError: if no path reports a birth time.
    """
    if not paths:
        raise ValueError("at least one input path is required")

    oldest: Optional[int] = None
    latest = ZERO_TIME_NS
    for raw_path in paths:
        path = Path(raw_path)
        created, modified = read_file_times(path)
        if created is not None and (oldest is None or created < oldest):
            oldest = created
        if latest < modified:
            latest = modified
        LOGGER.debug(
            render_fields_block(
                "Read File Times",
                {
                    "Path": path,
                    "Created": datetime_from_ns(created).isoformat() if created is not None else "(unavailable)",
                    "Modified": datetime_from_ns(modified).isoformat(),
                },
            )
        )

    if oldest is None:
        raise MissingCreationTimeError()

    return TimeAggregate.from_ns(oldest, latest)
