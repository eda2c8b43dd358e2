import logging
from pathlib import Path

import sfbackup.mirror_engine as mirror_engine
from sfbackup.remap import remap
from sfbackup.run_service import (
    EXIT_INVALID_CONFIG,
    EXIT_PARTIAL_FAILURES,
    EXIT_RUNTIME_OR_CONFIG_ERROR,
    EXIT_SUCCESS,
    run_backup_from_file,
)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _parameter_file(tmp_path: Path, src: Path, target: Path | None = None) -> Path:
    target = target or tmp_path / "backup"
    target.mkdir(parents=True, exist_ok=True)
    _write(tmp_path / "sources.txt", f"{src}\n")
    _write(tmp_path / "excludes.txt", "")
    parameter_file = tmp_path / "sfbackup.parms"
    _write(
        parameter_file,
        f"BackupSource={tmp_path / 'sources.txt'}\n"
        f"ExcludeSource={tmp_path / 'excludes.txt'}\n"
        f"BackupBaseLocation={target}/\n",
    )
    return parameter_file


def test_run_service_runs_backup_successfully(tmp_path: Path) -> None:
    src = tmp_path / "repo"
    _write(src / "a.txt", "1")
    parameter_file = _parameter_file(tmp_path, src)

    exit_code, context = run_backup_from_file(parameter_file)

    assert exit_code == EXIT_SUCCESS
    assert context is not None
    assert context.stats.copied == 1
    assert context.stats.failed == 0
    assert Path(remap(src / "a.txt", f"{tmp_path / 'backup'}/")).read_text(encoding="utf-8") == "1"


def test_run_service_invalid_config_does_no_copy_work(tmp_path: Path, caplog) -> None:
    src = tmp_path / "repo"
    _write(src / "a.txt", "1")
    parameter_file = _parameter_file(tmp_path, src)
    (tmp_path / "backup").rmdir()

    exit_code, context = run_backup_from_file(parameter_file)

    assert exit_code == EXIT_INVALID_CONFIG
    assert context is None
    assert not (tmp_path / "backup").exists()
    assert "not a valid directory structure" in caplog.text


def test_run_service_partial_failures_exit_code(tmp_path: Path, monkeypatch) -> None:
    src = tmp_path / "repo"
    _write(src / "a.txt", "1")
    _write(src / "b.txt", "2")
    parameter_file = _parameter_file(tmp_path, src)
    real_copy = mirror_engine._safe_copy

    def flaky_copy(source: Path, destination: Path) -> int:
        if source.name == "a.txt":
            raise OSError("disk said no")
        return real_copy(source, destination)

    monkeypatch.setattr(mirror_engine, "_safe_copy", flaky_copy)

    exit_code, context = run_backup_from_file(parameter_file)

    assert exit_code == EXIT_PARTIAL_FAILURES
    assert context is not None
    assert context.stats.copied == 1
    assert context.stats.failed == 1


def test_run_service_unexpected_error_returns_runtime_code(tmp_path: Path, monkeypatch) -> None:
    src = tmp_path / "repo"
    _write(src / "a.txt", "1")
    parameter_file = _parameter_file(tmp_path, src)

    def broken_collect(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(mirror_engine, "collect_all", broken_collect)

    exit_code, context = run_backup_from_file(parameter_file)

    assert exit_code == EXIT_RUNTIME_OR_CONFIG_ERROR
    assert context is None


def test_run_service_logs_progress(tmp_path: Path, caplog) -> None:
    caplog.set_level(logging.INFO, logger="sfbackup")
    src = tmp_path / "repo"
    _write(src / "sub" / "a.txt", "1")
    parameter_file = _parameter_file(tmp_path, src)

    run_backup_from_file(parameter_file)

    assert "Number of base directories to backup is 1" in caplog.text
    assert "Number of target directories created = 2" in caplog.text
    assert "Copied =>" in caplog.text
    assert "Terminating program execution" in caplog.text
