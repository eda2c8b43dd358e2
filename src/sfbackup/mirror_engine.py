from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from pathlib import Path
import shutil
import tempfile
import time

from sfbackup.collector import collect_all
from sfbackup.config import BackupConfig
from sfbackup.exclude_engine import ExcludeEngine, build_exclude_engine
from sfbackup.metadata import MetadataProvider, OsMetadataProvider
from sfbackup.models import (
    Candidate,
    CopyAction,
    EntryKind,
    FileMetadataSnapshot,
    MetadataState,
    RunContext,
)
from sfbackup.remap import RemapError, remap, volume_designator
from sfbackup.summary import log_summary


log = logging.getLogger("sfbackup.engine")


@dataclass(slots=True)
class MirrorRunOptions:
    dry_run: bool = False


def _safe_copy(source_file: Path, destination_file: Path) -> int:
    with tempfile.NamedTemporaryFile(delete=False, dir=str(destination_file.parent)) as tmp:
        tmp_path = Path(tmp.name)
    try:
        shutil.copy2(source_file, tmp_path)
        copied_bytes = tmp_path.stat().st_size
        tmp_path.replace(destination_file)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
    return copied_bytes


def filter_candidates(
    candidates: Iterable[Candidate],
    exclude_engine: ExcludeEngine,
    context: RunContext,
) -> list[Candidate]:
    """Drop excluded candidates and return the rest in path order."""
    stats = context.stats
    kept: list[Candidate] = []
    for candidate in candidates:
        stats.candidates += 1
        if exclude_engine.is_excluded(candidate.path, candidate.source_root, is_dir=candidate.is_dir):
            stats.excluded += 1
            continue
        kept.append(candidate)

    log.info("Number of potential backups = %s", stats.candidates)
    log.info("Number of potential backups after removing exclusions = %s", len(kept))
    kept.sort(key=lambda candidate: candidate.path)
    return kept


def materialize_directories(
    candidates: Iterable[Candidate],
    target_base: str,
    context: RunContext,
    options: MirrorRunOptions | None = None,
) -> int:
    """Create the target directory for every directory candidate; return how many were created."""
    options = options or MirrorRunOptions()
    stats = context.stats
    created = 0

    for candidate in candidates:
        if not candidate.is_dir:
            continue
        try:
            designator = volume_designator(candidate.path)
            target = Path(remap(candidate.path, target_base))
        except RemapError as exc:
            log.error("Cannot map directory %s: %s", candidate.path, exc)
            stats.directory_failures += 1
            continue

        context.volume_tally.increment(designator)

        if target.is_dir():
            continue
        if options.dry_run:
            log.info("Would create directory %s", target)
            created += 1
            continue
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            log.error("Unable to create directory %s: %s", target, exc)
            stats.directory_failures += 1
            continue
        created += 1

    stats.directories_created += created
    for designator, count in context.volume_tally.items():
        log.info("Number of source directories on %r = %s", designator, count)
    log.info("Number of target directories created = %s", created)
    return created


def decide_copy(source: FileMetadataSnapshot, target: FileMetadataSnapshot) -> CopyAction:
    if target.state is MetadataState.ABSENT:
        return CopyAction.COPY_NEW
    if source.in_sync_with(target):
        return CopyAction.SKIP_IN_SYNC
    return CopyAction.OVERWRITE


def _record_copy(context: RunContext, source: Path, copied_bytes: int) -> None:
    context.stats.copied += 1
    context.stats.bytes_copied += copied_bytes
    log.info("Copied => %s %s", source, copied_bytes)


def copy_file(
    candidate: Candidate,
    target_base: str,
    context: RunContext,
    provider: MetadataProvider,
    options: MirrorRunOptions,
) -> CopyAction | None:
    """Mirror one file candidate; failures are logged and counted, never raised."""
    stats = context.stats
    source = candidate.path
    try:
        destination = Path(remap(source, target_base))
    except RemapError as exc:
        log.error("Cannot map file %s: %s", source, exc)
        stats.failed += 1
        return None

    target_snapshot = provider.snapshot(destination)
    if target_snapshot.state is MetadataState.ABSENT:
        source_snapshot = FileMetadataSnapshot.unknown()
    else:
        source_snapshot = provider.snapshot(source)
        if target_snapshot.state is MetadataState.UNKNOWN:
            log.warning("Target metadata unknown for %s, treating as stale", destination)

    action = decide_copy(source_snapshot, target_snapshot)
    if action is CopyAction.SKIP_IN_SYNC:
        stats.skipped += 1
        log.debug("In sync, skipped %s", source)
        return action

    if action is CopyAction.OVERWRITE and target_snapshot.read_only and not options.dry_run:
        try:
            provider.clear_read_only(destination)
        except OSError as exc:
            log.error("Unable to clear read-only attribute on %s, skipping %s: %s", destination, source, exc)
            stats.failed += 1
            return None

    if options.dry_run:
        size = source_snapshot.size if source_snapshot.exists else provider.snapshot(source).size
        log.info("Would copy %s -> %s", source, destination)
        _record_copy(context, source, size)
        return action

    try:
        copied_bytes = _safe_copy(source, destination)
    except OSError as exc:
        log.error("Copy failed %s -> %s: %s", source, destination, exc)
        stats.failed += 1
        return None

    _record_copy(context, source, copied_bytes)
    return action


def copy_files(
    candidates: Iterable[Candidate],
    target_base: str,
    context: RunContext,
    provider: MetadataProvider | None = None,
    options: MirrorRunOptions | None = None,
) -> None:
    provider = provider or OsMetadataProvider()
    options = options or MirrorRunOptions()

    log.info("File backup operation(s) initiated")
    started = time.perf_counter()
    for candidate in candidates:
        if candidate.is_file:
            copy_file(candidate, target_base, context, provider, options)
        elif candidate.kind is EntryKind.OTHER:
            log.warning("Not a regular file or directory, not copied: %s", candidate.path)
            context.stats.failed += 1
    context.stats.elapsed_seconds += time.perf_counter() - started
    log.info("File backup operation(s) complete!")


def run_backup(
    config: BackupConfig,
    options: MirrorRunOptions | None = None,
    provider: MetadataProvider | None = None,
    logger: logging.Logger | None = None,
) -> RunContext:
    run_log = logger or log
    options = options or MirrorRunOptions()
    provider = provider or OsMetadataProvider()
    context = RunContext()

    run_log.info("Number of base directories to backup is %s", len(config.source_roots))
    for root in config.source_roots:
        context.volume_tally.register(volume_designator(root))

    exclude_engine = build_exclude_engine(config)
    candidates = filter_candidates(
        collect_all(config.source_roots, follow_symlinks=config.follow_symlinks),
        exclude_engine,
        context,
    )

    materialize_directories(candidates, config.target_base, context, options)
    copy_files(candidates, config.target_base, context, provider, options)
    log_summary(context, logger)
    return context
