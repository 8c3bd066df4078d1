from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from goproconcat.models import ToolPaths

FFMPEG = "/usr/local/bin/ffmpeg"
SETFILE = "/usr/bin/SetFile"


def _read_manifest(path: Path) -> list[Path]:
    entries = []
    for line in path.read_text(encoding="utf-8").splitlines():
        assert line.startswith("file '") and line.endswith("'")
        entries.append(Path(line[len("file '") : -1].replace("'\\''", "'")))
    return entries


@dataclass
class FakeTools:
    """Stands in for ffmpeg and SetFile by intercepting ``subprocess.run``.

    The fake ffmpeg concatenates the manifest's files byte for byte into the
    output path.
    """

    ffmpeg_returncode: int = 0
    ffmpeg_stderr: str = ""
    setfile_returncode: int = 0
    calls: list[list[str]] = field(default_factory=list)
    manifests: list[Path] = field(default_factory=list)
    manifest_entries: list[list[Path]] = field(default_factory=list)

    @property
    def paths(self) -> ToolPaths:
        return ToolPaths(ffmpeg=FFMPEG, setfile=SETFILE)

    @property
    def ffmpeg_calls(self) -> list[list[str]]:
        return [call for call in self.calls if call[0] == FFMPEG]

    @property
    def setfile_calls(self) -> list[list[str]]:
        return [call for call in self.calls if call[0] == SETFILE]

    def __call__(self, command, **kwargs) -> subprocess.CompletedProcess:
        command = list(command)
        self.calls.append(command)
        if command[0] == FFMPEG:
            return self._ffmpeg(command)
        if command[0] == SETFILE:
            return subprocess.CompletedProcess(command, self.setfile_returncode, "", "")
        raise AssertionError(f"unexpected command: {command}")

    def _ffmpeg(self, command: list[str]) -> subprocess.CompletedProcess:
        manifest = Path(command[command.index("-i") + 1])
        entries = _read_manifest(manifest)
        self.manifests.append(manifest)
        self.manifest_entries.append(entries)
        output = Path(command[-1])
        with output.open("wb") as handle:
            for entry in entries:
                handle.write(entry.read_bytes())
        return subprocess.CompletedProcess(command, self.ffmpeg_returncode, "", self.ffmpeg_stderr)


@pytest.fixture
def fake_tools(monkeypatch) -> FakeTools:
    tools = FakeTools()
    monkeypatch.setattr("goproconcat.ffmpeg.subprocess.run", tools)
    monkeypatch.setattr("goproconcat.timestamps.subprocess.run", tools)
    return tools
