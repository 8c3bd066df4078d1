"""Startup probe for the platform and external tools a merge depends on.

This is the only place that consults the host platform and ``PATH``; the
resolved tool paths are handed to the merger instead of being looked up again.
"""

from __future__ import annotations

import logging
import platform
import shutil

from .config import Settings
from .errors import RequirementUnmetError
from .logging_utils import render_fields_block
from .models import ToolPaths

LOGGER = logging.getLogger(__name__)

FFMPEG_HINT = "Please install it using Homebrew:\n\nbrew install ffmpeg"
SETFILE_HINT = "Please install Command Line Tools:\n\nxcode-select --install"


def check_requirements(settings: Settings | None = None) -> ToolPaths:
    """Verify birth-time support and resolve ffmpeg and SetFile.

    Raises:
        RequirementUnmetError: with a remediation hint when anything is missing.
    """
    settings = settings or Settings()

    if settings.require_macos and platform.system() != "Darwin":
        raise RequirementUnmetError(
            "this program is designed to run on macOS",
            "Birth-time attributes and SetFile are only available there. "
            "Set 'require_macos: false' to skip this check.",
        )

    ffmpeg = shutil.which(settings.ffmpeg_binary)
    if ffmpeg is None:
        raise RequirementUnmetError(f"{settings.ffmpeg_binary} is not installed.", FFMPEG_HINT)

    setfile = shutil.which(settings.setfile_binary)
    if setfile is None:
        raise RequirementUnmetError(f"{settings.setfile_binary} is not installed.", SETFILE_HINT)

    LOGGER.debug(render_fields_block("Requirements Satisfied", {"ffmpeg": ffmpeg, "SetFile": setfile}))
    return ToolPaths(ffmpeg=ffmpeg, setfile=setfile)
