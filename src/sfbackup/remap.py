"""Source path to target path remapping.

A source path has the shape ``<volume-designator><separator><rest>``. Two
shapes are recognised:

- a drive designator such as ``C:`` followed by the rest of the path
  (``C:\\Users\\me`` -> designator ``C:``, volume id ``C``, rest ``\\Users\\me``)
- a POSIX absolute path whose first segment names the volume
  (``/data/photos`` -> designator ``/data``, volume id ``data``, rest ``/photos``)

The target path is the target base with the volume id and the rest appended
verbatim, so ``remap("V:\\a\\b", "T:\\Backup")`` is ``"T:\\BackupV\\a\\b"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
import re


MIN_DESIGNATOR_LENGTH = 2

_DRIVE_RE = re.compile(r"^(?P<volume>[A-Za-z]):(?P<rest>.*)$", re.DOTALL)


class RemapError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class VolumePath:
    designator: str
    volume_id: str
    remainder: str


def parse_source_path(path: str | PathLike[str]) -> VolumePath:
    text = str(path)
    if len(text) < MIN_DESIGNATOR_LENGTH:
        raise RemapError(f"Path is shorter than a volume designator: {text!r}")

    drive = _DRIVE_RE.match(text)
    if drive:
        volume = drive.group("volume")
        return VolumePath(designator=f"{volume}:", volume_id=volume, remainder=drive.group("rest"))

    if text.startswith("/") and not text.startswith("//"):
        head, sep, rest = text[1:].partition("/")
        if not head:
            raise RemapError(f"Path has an empty volume segment: {text!r}")
        return VolumePath(designator=f"/{head}", volume_id=head, remainder=f"{sep}{rest}")

    raise RemapError(f"Path does not start with a volume designator: {text!r}")


def volume_designator(path: str | PathLike[str]) -> str:
    return parse_source_path(path).designator


def remap(source_path: str | PathLike[str], target_base: str) -> str:
    parsed = parse_source_path(source_path)
    return f"{target_base}{parsed.volume_id}{parsed.remainder}"
