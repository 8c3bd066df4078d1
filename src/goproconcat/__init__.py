"""Reassemble chaptered camera recordings into one continuous file.

The package is organized into focused modules:

- **parsers.chapter_filename**: ordering keys from chapter filenames
- **file_times**: earliest creation / latest modification across the inputs
- **merger**: validation, ordering, ffmpeg delegation and timestamp stamping
- **ffmpeg**: concat manifest and stream-copy invocation
- **timestamps**: SetFile birth time and ``os.utime`` updates
- **requirements**: platform and tool probe run once at startup
- **cli**: command-line entry point

The main entry point for programmatic use is ``merge_files``.
"""

from .file_times import aggregate_file_times
from .merger import Merger, build_merge_plan, merge_files
from .models import InputFile, MergePlan, MergeState, TimeAggregate, ToolPaths
from .parsers.chapter_filename import parse_file_name
from .requirements import check_requirements
from .version import __version__

__all__ = [
    "__version__",
    "InputFile",
    "MergePlan",
    "MergeState",
    "Merger",
    "TimeAggregate",
    "ToolPaths",
    "aggregate_file_times",
    "build_merge_plan",
    "check_requirements",
    "merge_files",
    "parse_file_name",
]
