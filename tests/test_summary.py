import logging

import pytest

from sfbackup.models import RunContext, RunStats
from sfbackup.summary import log_summary, select_unit, summarize, summary_lines


@pytest.mark.parametrize(
    ("total", "value", "unit"),
    [
        (0, 0.0, "bytes"),
        (500, 500.0, "bytes"),
        (1024, 1024.0, "bytes"),
        (2048, 2.0, "KB"),
        (1024 * 1024, 1024.0, "KB"),
        (5 * 1024**2, 5.0, "MB"),
        (3 * 1024**3, 3.0, "GB"),
    ],
)
def test_select_unit_uses_binary_thresholds(total: int, value: float, unit: str) -> None:
    assert select_unit(total) == (value, unit)


def test_summarize_computes_mean_and_average_duration() -> None:
    stats = RunStats(copied=4, bytes_copied=2048, elapsed_seconds=2.0)

    summary = summarize(stats)

    assert summary.unit == "KB"
    assert summary.display_value == 2.0
    assert summary.mean_file_size == 512.0
    assert summary.average_seconds_per_file == 0.5


def test_zero_files_has_no_average_line_and_no_division() -> None:
    summary = summarize(RunStats(elapsed_seconds=1.5))

    lines = summary_lines(summary)

    assert summary.mean_file_size == 0.0
    assert summary.average_seconds_per_file is None
    assert not any(line.startswith("Average duration") for line in lines)
    assert "Total files copied = 0" in lines


def test_summary_lines_render_display_unit() -> None:
    lines = summary_lines(summarize(RunStats(copied=1, bytes_copied=5 * 1024**2, elapsed_seconds=1.0)))

    assert "5.00 MB copied" in lines
    assert "Average duration per backup = 1.00 seconds." in lines


def test_log_summary_writes_counts(caplog) -> None:
    caplog.set_level(logging.INFO, logger="sfbackup")
    context = RunContext(stats=RunStats(copied=2, bytes_copied=500, skipped=3, failed=1))

    summary = log_summary(context)

    assert summary.files_copied == 2
    assert "500.00 bytes copied" in caplog.text
    assert "file failures = 1" in caplog.text
