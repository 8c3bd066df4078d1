"""Ordering keys from chaptered recording filenames.

Cameras that split one continuous recording write chapters named like
``GH010042.MP4``: a two-letter encoding prefix (``GH`` for AVC, ``GX`` for
HEVC), two digits of chapter index and four digits of file number. The
chapter comes first in the name but varies fastest within a recording, so
playback order is (file number, chapter).
"""

from __future__ import annotations

import re
from pathlib import Path

from ..errors import InvalidFilenameFormatError
from ..models import InputFile

CHAPTER_FILENAME_PATTERN = re.compile(
    r"(?P<prefix>GH|GX)(?P<chapter>\d{2})(?P<file>\d{4})\.(?P<extension>MP4)",
    re.IGNORECASE,
)


def parse_file_name(path: Path | str) -> InputFile:
    """Return the ordering key encoded in ``path``'s base name.

    Raises:
        InvalidFilenameFormatError: if the name does not follow the chapter
            naming convention.
    """
    match = CHAPTER_FILENAME_PATTERN.search(Path(path).name)
    if match is None:
        raise InvalidFilenameFormatError(path)
    return InputFile(
        path=Path(path),
        file_number=int(match.group("file")),
        chapter_number=int(match.group("chapter")),
    )


def is_chapter_file(path: Path | str) -> bool:
    return CHAPTER_FILENAME_PATTERN.search(Path(path).name) is not None
