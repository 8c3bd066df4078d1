from __future__ import annotations

import datetime as dt
import os
from pathlib import Path
from types import SimpleNamespace

import pytest

from goproconcat import file_times
from goproconcat.errors import MissingCreationTimeError, StatFailureError
from goproconcat.file_times import (
    ZERO_TIME,
    _birth_time,
    aggregate_file_times,
    datetime_from_ns,
    datetime_to_ns,
    read_file_times,
)

UTC = dt.timezone.utc


def _at(year: int, month: int = 1, day: int = 1) -> dt.datetime:
    return dt.datetime(year, month, day, tzinfo=UTC)


def _patch_times(monkeypatch, times: dict[str, tuple[dt.datetime | None, dt.datetime]]) -> None:
    def fake_read(path: Path):
        created, modified = times[path.name]
        return (datetime_to_ns(created) if created is not None else None, datetime_to_ns(modified))

    monkeypatch.setattr(file_times, "read_file_times", fake_read)


def test_aggregate_returns_earliest_creation_and_latest_modification(monkeypatch) -> None:
    _patch_times(
        monkeypatch,
        {
            "a.mp4": (_at(2020), _at(2020, 6)),
            "b.mp4": (_at(2021), _at(2021, 6)),
        },
    )

    aggregate = aggregate_file_times([Path("a.mp4"), Path("b.mp4")])

    assert aggregate.earliest_creation == _at(2020)
    assert aggregate.latest_modification == _at(2021, 6)


def test_aggregate_is_independent_of_input_order(monkeypatch) -> None:
    _patch_times(
        monkeypatch,
        {
            "a.mp4": (_at(2020), _at(2020, 6)),
            "b.mp4": (_at(2021), _at(2021, 6)),
            "c.mp4": (_at(2019, 3), _at(2019, 4)),
        },
    )

    forward = aggregate_file_times(["a.mp4", "b.mp4", "c.mp4"])
    backward = aggregate_file_times(["c.mp4", "b.mp4", "a.mp4"])

    assert forward == backward
    assert forward.earliest_creation == _at(2019, 3)
    assert forward.latest_modification == _at(2021, 6)


def test_aggregate_skips_files_without_birth_time(monkeypatch) -> None:
    _patch_times(
        monkeypatch,
        {
            "a.mp4": (None, _at(2022)),
            "b.mp4": (_at(2021), _at(2021, 6)),
        },
    )

    aggregate = aggregate_file_times(["a.mp4", "b.mp4"])

    assert aggregate.earliest_creation == _at(2021)
    assert aggregate.latest_modification == _at(2022)


def test_aggregate_modification_maximum_starts_at_zero_value(monkeypatch) -> None:
    ancient = dt.datetime(1, 1, 2, tzinfo=UTC)
    _patch_times(monkeypatch, {"a.mp4": (_at(2020), ancient)})

    aggregate = aggregate_file_times(["a.mp4"])

    assert aggregate.latest_modification == ancient
    assert ZERO_TIME < ancient


def test_aggregate_requires_a_birth_time(monkeypatch) -> None:
    _patch_times(monkeypatch, {"a.mp4": (None, _at(2020)), "b.mp4": (None, _at(2021))})

    with pytest.raises(MissingCreationTimeError):
        aggregate_file_times(["a.mp4", "b.mp4"])


def test_aggregate_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        aggregate_file_times([])


def test_read_file_times_reports_missing_file(tmp_path) -> None:
    missing = tmp_path / "GH010001.MP4"

    with pytest.raises(StatFailureError) as excinfo:
        read_file_times(missing)

    assert excinfo.value.path == missing
    assert str(missing) in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_aggregate_propagates_stat_failure(tmp_path) -> None:
    present = tmp_path / "GH010001.MP4"
    present.write_bytes(b"data")
    missing = tmp_path / "GH020001.MP4"

    with pytest.raises(StatFailureError) as excinfo:
        aggregate_file_times([present, missing])

    assert excinfo.value.path == missing


def test_read_file_times_reads_modification_time(tmp_path) -> None:
    path = tmp_path / "GH010001.MP4"
    path.write_bytes(b"data")
    modified = _at(2021, 5, 4)
    os.utime(path, ns=(datetime_to_ns(modified), datetime_to_ns(modified)))

    _, mtime = read_file_times(path)

    assert mtime == datetime_to_ns(modified)


def test_birth_time_prefers_nanosecond_field() -> None:
    created = _at(2020, 2, 3)
    fake = SimpleNamespace(st_birthtime_ns=datetime_to_ns(created), st_birthtime=0.0)

    assert _birth_time(fake) == datetime_to_ns(created)


def test_birth_time_falls_back_to_float_field() -> None:
    created = _at(2020, 2, 3)
    fake = SimpleNamespace(st_birthtime=created.timestamp())

    assert _birth_time(fake) == datetime_to_ns(created)


def test_birth_time_missing_on_platforms_without_support() -> None:
    assert _birth_time(SimpleNamespace(st_mtime_ns=0)) is None


def test_datetime_ns_conversion_is_exact_to_the_microsecond() -> None:
    value = dt.datetime(2020, 1, 1, 12, 30, 15, 123456, tzinfo=UTC)

    assert datetime_from_ns(datetime_to_ns(value)) == value
    assert datetime_to_ns(_at(1970)) == 0


def test_aggregate_keeps_sub_microsecond_precision(monkeypatch) -> None:
    created_ns = 1_500_000_000_987_654_321
    modified_ns = 1_600_000_000_123_456_789
    monkeypatch.setattr(file_times, "read_file_times", lambda path: (created_ns, modified_ns))

    aggregate = aggregate_file_times(["a.mp4"])

    assert aggregate.creation_ns == created_ns
    assert aggregate.modification_ns == modified_ns
    assert aggregate.latest_modification == datetime_from_ns(modified_ns)


def test_read_file_times_returns_stat_nanoseconds(tmp_path) -> None:
    path = tmp_path / "GH010001.MP4"
    path.write_bytes(b"data")
    os.utime(path, ns=(1_600_000_000_123_456_789, 1_600_000_000_123_456_789))

    _, mtime = read_file_times(path)

    assert mtime == os.stat(path).st_mtime_ns
