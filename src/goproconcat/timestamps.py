"""Write reconciled timestamps back onto the merged output."""

from __future__ import annotations

import datetime as dt
import logging
import os
import subprocess
from pathlib import Path

from .errors import TimestampApplyFailureError
from .models import datetime_from_ns, datetime_to_ns
from .logging_utils import render_fields_block

LOGGER = logging.getLogger(__name__)

SETFILE_DATE_FORMAT = "%m/%d/%Y %H:%M:%S"


def format_setfile_date(value: dt.datetime) -> str:
    """Render ``value`` in the local timezone the way SetFile expects."""
    return value.astimezone().strftime(SETFILE_DATE_FORMAT)


def apply_creation_time(setfile: str, path: Path, creation_time: dt.datetime) -> None:
    """Set the birth time of ``path`` with ``SetFile -d``.

    Raises:
        TimestampApplyFailureError: if SetFile cannot run or exits non-zero.
    """
    formatted = format_setfile_date(creation_time)
    command = [setfile, "-d", formatted, str(path)]
    LOGGER.info(render_fields_block("Setting Creation Time", {"Path": path, "Creation Time": formatted}))
    try:
        result = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise TimestampApplyFailureError(path, "set creation time", exc) from exc
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip() or f"exit status {result.returncode}"
        raise TimestampApplyFailureError(path, "set creation time", detail)


def _as_ns(value: dt.datetime | int) -> int:
    return value if isinstance(value, int) else datetime_to_ns(value)


def apply_file_times(path: Path, access_time: dt.datetime | int, modification_time: dt.datetime | int) -> None:
    """Set access and modification times of ``path``.

    Integers are epoch nanoseconds and are applied unchanged.

    Raises:
        TimestampApplyFailureError: if the filesystem rejects the update.
    """
    access_ns = _as_ns(access_time)
    modification_ns = _as_ns(modification_time)
    try:
        os.utime(path, ns=(access_ns, modification_ns))
    except OSError as exc:
        raise TimestampApplyFailureError(path, "set file times", exc) from exc
    LOGGER.debug(
        render_fields_block(
            "Applied File Times",
            {
                "Path": path,
                "Accessed": datetime_from_ns(access_ns).isoformat(),
                "Modified": datetime_from_ns(modification_ns).isoformat(),
            },
        )
    )
