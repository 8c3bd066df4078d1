"""Stream-copy concatenation through ffmpeg's concat demuxer."""

from __future__ import annotations

import datetime as dt
import logging
import os
import subprocess
import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from .errors import ExternalToolFailureError
from .logging_utils import render_fields_block

LOGGER = logging.getLogger(__name__)

RFC3339_UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_rfc3339(value: dt.datetime) -> str:
    return value.astimezone(dt.timezone.utc).strftime(RFC3339_UTC_FORMAT)


def _manifest_line(path: Path) -> str:
    escaped = str(path).replace("'", "'\\''")
    return f"file '{escaped}'\n"


@contextmanager
def concat_manifest(paths: Sequence[Path]) -> Iterator[Path]:
    """Write a concat-demuxer manifest and remove it when the block exits."""
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        prefix="goproconcat-",
        suffix=".txt",
        delete=False,
    )
    manifest = Path(handle.name)
    try:
        with handle:
            for path in paths:
                handle.write(_manifest_line(path))
        yield manifest
    finally:
        try:
            os.remove(manifest)
        except FileNotFoundError:
            pass


def build_concat_command(
    ffmpeg: str,
    manifest: Path,
    output_path: Path,
    creation_time: dt.datetime,
    *,
    metadata_tag: str = "gpmd",
    overwrite: bool = True,
) -> list[str]:
    """Build the ffmpeg invocation for a stream-copy concat.

    Video is required; audio and the third (telemetry) stream are mapped only
    when present. Stream 2 of the output is tagged ``metadata_tag``.
    """
    command = [
        ffmpeg,
        "-f", "concat",
        "-safe", "0",
        "-i", str(manifest),
        "-c", "copy",
    ]
    command.append("-y" if overwrite else "-n")
    command.extend(
        [
            "-map", "0:v",
            "-map", "0:a?",
            "-map", "0:3?",
            "-copy_unknown",
            "-tag:2", metadata_tag,
            "-metadata", f"creation_time={format_rfc3339(creation_time)}",
            str(output_path),
        ]
    )
    return command


def run_concat(
    ffmpeg: str,
    input_paths: Sequence[Path],
    output_path: Path,
    creation_time: dt.datetime,
    *,
    metadata_tag: str = "gpmd",
    overwrite: bool = True,
) -> str:
    """Concatenate ``input_paths`` in order into ``output_path``.

    Returns the diagnostic output ffmpeg wrote.

    Raises:
        ExternalToolFailureError: if ffmpeg cannot be launched or exits non-zero.
    """
    with concat_manifest(input_paths) as manifest:
        command = build_concat_command(
            ffmpeg,
            manifest,
            output_path,
            creation_time,
            metadata_tag=metadata_tag,
            overwrite=overwrite,
        )
        LOGGER.info(
            render_fields_block(
                "Running ffmpeg",
                {
                    "Inputs": len(input_paths),
                    "Output": output_path,
                    "Creation Time": format_rfc3339(creation_time),
                },
            )
        )
        LOGGER.debug("ffmpeg command: %s", subprocess.list2cmdline(command))
        try:
            result = subprocess.run(command, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ExternalToolFailureError(command, reason=exc) from exc

    output = "\n".join(part for part in (result.stdout, result.stderr) if part)
    if result.returncode != 0:
        raise ExternalToolFailureError(command, returncode=result.returncode, output=output)
    LOGGER.debug("ffmpeg output:\n%s", output)
    return output
