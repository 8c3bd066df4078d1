from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from .config import Settings
from .errors import DuplicateInputError, ExternalToolFailureError
from .ffmpeg import build_concat_command, run_concat
from .logging_utils import render_fields_block, render_list_block
from .models import InputFile, MergePlan, MergeState, TimeAggregate, ToolPaths
from .parsers.chapter_filename import parse_file_name
from .timestamps import apply_creation_time, apply_file_times

LOGGER = logging.getLogger(__name__)


def absolute_path(path: Path | str) -> Path:
    """Absolute, normalized form of ``path`` without following symlinks."""
    return Path(os.path.abspath(path))


def validate_inputs(input_paths: Sequence[Path | str]) -> list[InputFile]:
    """Parse every input, rejecting duplicates and malformed names.

    Duplicates are detected by absolute path, not by content, so two links to
    the same bytes are accepted.
    """
    if not input_paths:
        raise ValueError("at least one input path is required")

    seen: set[Path] = set()
    files: list[InputFile] = []
    for raw_path in input_paths:
        resolved = absolute_path(raw_path)
        if resolved in seen:
            raise DuplicateInputError(resolved)
        seen.add(resolved)

        parsed = parse_file_name(raw_path)
        files.append(InputFile(path=resolved, file_number=parsed.file_number, chapter_number=parsed.chapter_number))
    return files


def build_merge_plan(input_paths: Sequence[Path | str]) -> MergePlan:
    return MergePlan.from_files(validate_inputs(input_paths))


class Merger:
    """Runs one merge from validation through timestamp reconciliation.

    States advance ``validating -> ordering -> concatenating ->
    stamping-creation -> stamping-times -> done``. Any exception moves the
    merger to ``failed`` and records the state it failed in; a merger is
    single-use.

    ``on_plan`` receives the ordered plan before any external tool runs.
    """

    def __init__(
        self,
        tools: ToolPaths,
        settings: Settings | None = None,
        *,
        on_plan: Callable[[MergePlan], None] | None = None,
    ) -> None:
        self.tools = tools
        self.settings = settings or Settings()
        self.on_plan = on_plan
        self.state: MergeState | None = None
        self.failed_state: MergeState | None = None
        self.plan: MergePlan | None = None

    @staticmethod
    def _format_log(event: str, fields: Mapping[str, object] | None = None) -> str:
        return render_fields_block(event, fields or {}, pad_top=True)

    def _enter(self, state: MergeState) -> None:
        LOGGER.debug("Merge state: %s -> %s", self.state.value if self.state else "start", state.value)
        self.state = state

    def run(
        self,
        output_path: Path | str,
        input_paths: Sequence[Path | str],
        aggregate: TimeAggregate,
    ) -> MergePlan:
        if self.state is not None:
            raise RuntimeError("Merger instances are single-use; create a new one per merge")

        try:
            return self._run(Path(output_path), input_paths, aggregate)
        except Exception:
            self.failed_state = self.state
            self.state = MergeState.FAILED
            raise

    def _run(self, output_path: Path, input_paths: Sequence[Path | str], aggregate: TimeAggregate) -> MergePlan:
        self._enter(MergeState.VALIDATING)
        files = validate_inputs(input_paths)

        self._enter(MergeState.ORDERING)
        plan = MergePlan.from_files(files)
        self.plan = plan
        LOGGER.debug(render_list_block("Merge Plan", plan.paths))
        if self.on_plan is not None:
            self.on_plan(plan)

        if self.settings.dry_run:
            command = build_concat_command(
                self.tools.ffmpeg,
                Path("<manifest>"),
                output_path,
                aggregate.earliest_creation,
                metadata_tag=self.settings.metadata_tag,
                overwrite=self.settings.overwrite,
            )
            LOGGER.info(
                self._format_log(
                    "Dry-Run: Skipping Merge",
                    {
                        "Output": output_path,
                        "Inputs": len(plan),
                        "Command": " ".join(command),
                    },
                )
            )
            self._enter(MergeState.DONE)
            return plan

        self._enter(MergeState.CONCATENATING)
        try:
            run_concat(
                self.tools.ffmpeg,
                plan.paths,
                output_path,
                aggregate.earliest_creation,
                metadata_tag=self.settings.metadata_tag,
                overwrite=self.settings.overwrite,
            )
        except OSError as exc:
            raise ExternalToolFailureError([self.tools.ffmpeg], reason=exc) from exc

        self._enter(MergeState.STAMPING_CREATION)
        apply_creation_time(self.tools.setfile, output_path, aggregate.earliest_creation)

        self._enter(MergeState.STAMPING_TIMES)
        apply_file_times(output_path, aggregate.creation_ns, aggregate.modification_ns)

        self._enter(MergeState.DONE)
        LOGGER.info(
            self._format_log(
                "Merge Complete",
                {
                    "Output": output_path,
                    "Chapters": len(plan),
                    "Created": aggregate.earliest_creation.isoformat(),
                    "Modified": aggregate.latest_modification.isoformat(),
                },
            )
        )
        return plan


def merge_files(
    output_path: Path | str,
    input_paths: Sequence[Path | str],
    aggregate: TimeAggregate,
    tools: ToolPaths,
    *,
    settings: Settings | None = None,
) -> MergePlan:
    """Merge ``input_paths`` into ``output_path`` and stamp it with ``aggregate``."""
    return Merger(tools, settings).run(output_path, input_paths, aggregate)
