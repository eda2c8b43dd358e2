from __future__ import annotations

import logging
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath
from typing import Iterable

import pathspec

from sfbackup.config import BackupConfig


log = logging.getLogger("sfbackup.exclude")


def _path_segments(path: str | PurePath) -> tuple[str, ...]:
    text = str(path)
    if text.startswith("\\\\") or (len(text) >= 2 and text[1] == ":"):
        pure: PurePath = PureWindowsPath(text)
        return tuple(part.lower() for part in pure.parts)
    return PurePosixPath(text).parts


class _PrefixNode:
    __slots__ = ("children", "terminal")

    def __init__(self) -> None:
        self.children: dict[str, _PrefixNode] = {}
        self.terminal = False


class PrefixTrie:
    """Exclude prefixes keyed by path segment, so ``/data`` never matches ``/database``."""

    def __init__(self, prefixes: Iterable[str | PurePath] = ()) -> None:
        self._root = _PrefixNode()
        self._size = 0
        for prefix in prefixes:
            self.add(prefix)

    def __len__(self) -> int:
        return self._size

    def add(self, prefix: str | PurePath) -> None:
        segments = _path_segments(prefix)
        if not segments:
            return
        node = self._root
        for segment in segments:
            node = node.children.setdefault(segment, _PrefixNode())
        if not node.terminal:
            node.terminal = True
            self._size += 1

    def covers(self, path: str | PurePath) -> bool:
        node = self._root
        for segment in _path_segments(path):
            node = node.children.get(segment)
            if node is None:
                return False
            if node.terminal:
                return True
        return False


class ExcludeEngine:
    def __init__(self, prefixes: Iterable[str | PurePath] = (), patterns: Iterable[str] = ()) -> None:
        self._prefixes = PrefixTrie(prefixes)
        pattern_list = [pattern for pattern in patterns if pattern.strip()]
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", pattern_list) if pattern_list else None

    @property
    def prefix_count(self) -> int:
        return len(self._prefixes)

    def is_excluded(self, path: Path, source_root: Path | None = None, is_dir: bool = False) -> bool:
        if self._prefixes.covers(path):
            return True
        if self._spec is None or source_root is None:
            return False
        try:
            relative = path.relative_to(source_root)
        except ValueError:
            return False
        unix_path = relative.as_posix()
        if unix_path == ".":
            return False
        candidate = f"{unix_path}/" if is_dir and not unix_path.endswith("/") else unix_path
        return self._spec.match_file(candidate)


def build_exclude_engine(config: BackupConfig) -> ExcludeEngine:
    engine = ExcludeEngine(config.exclude_prefixes, config.exclude_patterns)
    log.info("Number of directories to exclude is %s", engine.prefix_count)
    return engine
