"""JSONL telemetry storage.

One `<kind>.jsonl` file per kind under a directory; each line is one event
as JSON. When the active file reaches the size threshold it is renamed
with a timestamp suffix before the next append. Rotated files are kept.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path, PurePath

from filelock import FileLock

from harnex.errors import IoFailure, PathTraversal
from harnex.telemetry.events import Event


@contextmanager
def _exclusive_lock(data_path: Path) -> Iterator[None]:
    """Hold an advisory lock on `<data_path>.lock` across processes.

    A sibling file is locked because rotation renames the data file.
    """
    lock_path = data_path.with_name(data_path.name + ".lock")
    lock = FileLock(str(lock_path))
    try:
        lock.acquire()
    except OSError as exc:
        raise IoFailure(lock_path, exc) from exc
    try:
        yield
    finally:
        lock.release()


def _is_single_component(name: str) -> bool:
    return name not in ("", ".", "..") and PurePath(name).name == name and (
        "/" not in name and os.sep not in name and (os.altsep is None or os.altsep not in name)
    )


class JsonlStorage:
    """Append-only JSONL ledger, one file per telemetry kind."""

    def __init__(self, directory: str | os.PathLike[str], rotate_at_mb: int) -> None:
        self.dir = Path(directory)
        self.rotate_at_bytes = rotate_at_mb * 1024 * 1024

    def _current_file(self, kind: str) -> Path:
        return self.dir / f"{kind}.jsonl"

    def _rotate_if_needed(self, path: Path) -> None:
        try:
            size = path.stat().st_size
        except OSError:
            size = 0
        if size == 0 or size < self.rotate_at_bytes:
            return
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        stem = path.stem or "rotated"
        rotated = path.with_name(f"{stem}-{stamp}.jsonl")
        counter = 1
        # Never overwrite an earlier rotation from the same second.
        while rotated.exists():
            rotated = path.with_name(f"{stem}-{stamp}-{counter}.jsonl")
            counter += 1
        try:
            path.rename(rotated)
        except OSError as exc:
            raise IoFailure(path, exc) from exc

    def append(self, event: Event) -> None:
        """Append `event` to its kind's ledger, rotating first when needed."""
        if ".." in self.dir.parts:
            raise PathTraversal(self.dir)
        try:
            self.dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IoFailure(self.dir, exc) from exc

        if not _is_single_component(event.kind):
            raise PathTraversal(f"{event.kind}.jsonl")
        path = self._current_file(event.kind)
        if path.is_symlink():
            raise PathTraversal(path)

        try:
            line = json.dumps(event.to_dict(), ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise IoFailure(path, exc) from exc

        with _exclusive_lock(path):
            self._rotate_if_needed(path)
            try:
                with path.open("a", encoding="utf-8", newline="\n") as handle:
                    handle.write(line + "\n")
            except OSError as exc:
                raise IoFailure(path, exc) from exc

    def scan(self) -> Iterator[Event]:
        """Yield every readable event, files in name order, lines in file order.

        I/O errors raise IoFailure; lines that are not valid events are skipped.
        """
        if not self.dir.exists():
            return
        try:
            paths = sorted(entry for entry in self.dir.iterdir() if entry.suffix == ".jsonl")
        except OSError as exc:
            raise IoFailure(self.dir, exc) from exc
        for path in paths:
            for line in self._read_lines(path):
                if not line.strip():
                    continue
                try:
                    yield Event.from_dict(json.loads(line))
                except ValueError:
                    continue

    @staticmethod
    def _read_lines(path: Path) -> Iterator[str]:
        try:
            with path.open("r", encoding="utf-8", newline="\n") as handle:
                for raw in handle:
                    line = raw[:-1] if raw.endswith("\n") else raw
                    yield line[:-1] if line.endswith("\r") else line
        except (OSError, UnicodeDecodeError) as exc:
            raise IoFailure(path, exc) from exc