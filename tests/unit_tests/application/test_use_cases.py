"""Unit tests for configuration building and batch planning."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from csv_converter.application.options import ConversionConfig, ConversionJob
from csv_converter.application.results import ConversionResult
from csv_converter.application.use_cases import (
    build_conversion_config,
    convert_directory,
    plan_jobs,
)
from csv_converter.errors import AccessError, ConversionError, NotDirectoryError


def test_build_config_defaults() -> None:
    config = build_conversion_config()

    assert config == ConversionConfig()
    assert config.delimiter == ";"
    assert config.uses_current_sheet
    assert config.formatting.locale == "en"
    assert config.formatting.thousand_separator is None


def test_build_config_maps_formatting_options() -> None:
    config = build_conversion_config(
        delimiter=",",
        sheet_index=2,
        add_bom=True,
        raw=True,
        allow_scientific=True,
        decimal_separator=",",
        thousand_separator="",
        locale="de",
        date_fixed_format="yyyy-mm-dd",
        trim=True,
    )

    assert config.delimiter == ","
    assert config.sheet_index == 2
    assert config.add_bom
    fmt = config.formatting
    assert fmt.raw and fmt.allow_scientific and fmt.trim
    assert fmt.decimal_separator == ","
    assert fmt.thousand_separator == ""
    assert fmt.locale == "de"
    assert fmt.date_fixed_format == "yyyy-mm-dd"


def test_build_config_uses_first_delimiter_character() -> None:
    assert build_conversion_config(delimiter="\t,").delimiter == "\t"


@pytest.mark.parametrize("delimiter", ["", '"', "\n"])
def test_build_config_rejects_bad_delimiter(delimiter: str) -> None:
    with pytest.raises(ConversionError, match="Invalid conversion parameters"):
        build_conversion_config(delimiter=delimiter)


def test_build_config_normalizes_negative_sheet_index() -> None:
    assert build_conversion_config(sheet_index=-7).sheet_index == -1


def test_build_config_treats_empty_strings_as_unset() -> None:
    config = build_conversion_config(decimal_separator="", date_fixed_format="")

    assert config.formatting.decimal_separator is None
    assert config.formatting.date_fixed_format is None


def test_config_is_immutable() -> None:
    """Ensure a config shared between workers cannot be mutated."""
    config = build_conversion_config()

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.delimiter = ","  # type: ignore[misc]


def test_plan_jobs_resolves_destinations_in_order() -> None:
    config = ConversionConfig()
    sources = [Path("/in/b.xlsx"), Path("/in/a.xls")]

    jobs = plan_jobs(sources, "*/out/*.csv", config)

    assert [job.source_path for job in jobs] == sources
    assert [job.destination_path for job in jobs] == [
        Path("/in/out/b.csv"),
        Path("/in/out/a.csv"),
    ]
    assert all(job.config is config for job in jobs)


def test_plan_jobs_allows_colliding_destinations() -> None:
    """Ensure a mask without wildcards still yields one job per source."""
    jobs = plan_jobs([Path("/in/a.xlsx"), Path("/in/b.xlsx")], "all.csv", ConversionConfig())

    assert [job.destination_path for job in jobs] == [Path("all.csv"), Path("all.csv")]


def _sized(path: Path, size: int) -> None:
    path.write_bytes(b"0" * size)


def test_convert_directory_dispatches_largest_first(tmp_path: Path) -> None:
    _sized(tmp_path / "small.xlsx", 1)
    _sized(tmp_path / "big.xlsx", 100)
    _sized(tmp_path / "mid.xls", 50)
    _sized(tmp_path / "readme.txt", 500)
    seen: list[ConversionJob] = []

    def _convert(job: ConversionJob) -> ConversionResult:
        seen.append(job)
        return ConversionResult(job.source_path, job.destination_path, 0)

    report = convert_directory(
        batch_path=tmp_path,
        mask="*/csv/*.csv",
        config=ConversionConfig(),
        worker_count=1,
        convert=_convert,
    )

    assert report.total == 3
    assert [job.source_path.name for job in seen] == ["big.xlsx", "mid.xls", "small.xlsx"]
    assert seen[0].destination_path == tmp_path / "csv" / "big.csv"


def test_convert_directory_empty_folder(tmp_path: Path) -> None:
    report = convert_directory(
        batch_path=tmp_path,
        mask="*/*.csv",
        config=ConversionConfig(),
        worker_count=2,
    )

    assert report.total == 0


def test_convert_directory_rejects_file(tmp_path: Path) -> None:
    target = tmp_path / "book.xlsx"
    _sized(target, 1)

    with pytest.raises(NotDirectoryError):
        convert_directory(
            batch_path=target,
            mask="*/*.csv",
            config=ConversionConfig(),
            worker_count=1,
        )


def test_convert_directory_missing_folder(tmp_path: Path) -> None:
    with pytest.raises(AccessError):
        convert_directory(
            batch_path=tmp_path / "nope",
            mask="*/*.csv",
            config=ConversionConfig(),
            worker_count=1,
        )


@pytest.mark.parametrize(("mask", "workers"), [("", 1), ("*/*.csv", 0)])
def test_convert_directory_validates_request(tmp_path: Path, mask: str, workers: int) -> None:
    with pytest.raises(ConversionError, match="Invalid batch parameters"):
        convert_directory(
            batch_path=tmp_path,
            mask=mask,
            config=ConversionConfig(),
            worker_count=workers,
        )
