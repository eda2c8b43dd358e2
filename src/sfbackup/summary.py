from __future__ import annotations

from dataclasses import dataclass
import logging

from sfbackup.models import RunContext, RunStats


KILO_BYTE = 1024
MEGA_BYTE = KILO_BYTE * KILO_BYTE
GIGA_BYTE = MEGA_BYTE * KILO_BYTE


@dataclass(frozen=True, slots=True)
class RunSummary:
    files_copied: int
    bytes_copied: int
    display_value: float
    unit: str
    mean_file_size: float
    elapsed_seconds: float
    average_seconds_per_file: float | None


def select_unit(total_bytes: int) -> tuple[float, str]:
    """Scale ``total_bytes`` to bytes, KB, MB or GB using 1024 multipliers."""
    if total_bytes <= KILO_BYTE:
        return float(total_bytes), "bytes"
    if total_bytes <= MEGA_BYTE:
        return total_bytes / KILO_BYTE, "KB"
    if total_bytes <= GIGA_BYTE:
        return total_bytes / MEGA_BYTE, "MB"
    return total_bytes / GIGA_BYTE, "GB"


def summarize(stats: RunStats) -> RunSummary:
    display_value, unit = select_unit(stats.bytes_copied)
    if stats.copied:
        mean_file_size = stats.bytes_copied / stats.copied
        average = stats.elapsed_seconds / stats.copied
    else:
        mean_file_size = 0.0
        average = None
    return RunSummary(
        files_copied=stats.copied,
        bytes_copied=stats.bytes_copied,
        display_value=display_value,
        unit=unit,
        mean_file_size=mean_file_size,
        elapsed_seconds=stats.elapsed_seconds,
        average_seconds_per_file=average,
    )


def summary_lines(summary: RunSummary) -> list[str]:
    lines = [
        f"Total files copied = {summary.files_copied}",
        f"Time to perform backups = {summary.elapsed_seconds:.2f} seconds.",
    ]
    if summary.average_seconds_per_file is not None:
        lines.append(f"Average duration per backup = {summary.average_seconds_per_file:.2f} seconds.")
    lines.append(f"{summary.display_value:.2f} {summary.unit} copied")
    lines.append(f"Average file size {summary.mean_file_size:.2f} bytes")
    return lines


def log_summary(context: RunContext, logger: logging.Logger | None = None) -> RunSummary:
    log = logger or logging.getLogger("sfbackup.summary")
    stats = context.stats
    summary = summarize(stats)

    for line in summary_lines(summary):
        log.info("%s", line)
    log.info(
        "Files skipped (in sync) = %s, file failures = %s, directory failures = %s",
        stats.skipped,
        stats.failed,
        stats.directory_failures,
    )
    return summary
