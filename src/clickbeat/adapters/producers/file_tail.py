"""Local file tailing source."""

import glob
import logging
from pathlib import Path
from typing import Any

from clickbeat.core.encoding.ndjson import decode_object

logger = logging.getLogger(__name__)


def line_to_object(line: str, path: str) -> dict[str, Any]:
    """Turn one file line into a generic event object.

    JSON object lines are used as-is; any other line becomes the message.
    ``log.file.path`` is filled in when the line does not carry a ``log``
    block of its own.
    """
    obj = decode_object(line)
    if obj is None:
        obj = {"message": line}
    obj.setdefault("log", {"file": {"path": path}})
    return obj


class FileTailProducer:
    """Reads newline-terminated lines from local files.

    Paths may be glob patterns and are re-expanded on every poll. Each file
    is tracked by byte offset; a file that shrinks is read again from the
    start. Without ``follow`` every file is read once and later appends are
    ignored. When following, a trailing line without a newline is held
    back until it is completed.

    Args:
        paths: File paths or glob patterns.
        follow: Keep reading content appended after the first poll.
    """

    name = "file"

    def __init__(
        self, paths: list[str] | tuple[str, ...], follow: bool = False
    ) -> None:
        self._patterns = tuple(paths)
        self._follow = follow
        self._offsets: dict[str, int] = {}

    def _expand(self) -> list[str]:
        found: list[str] = []
        for pattern in self._patterns:
            if any(char in pattern for char in "*?["):
                matches = sorted(glob.glob(pattern))
            else:
                matches = [pattern]
            found.extend(m for m in matches if m not in found and Path(m).is_file())
        return found

    def _read_new_lines(self, path: str) -> list[str]:
        offset = self._offsets.get(path, 0)
        with open(path, "rb") as handle:
            handle.seek(0, 2)
            if handle.tell() < offset:
                logger.info("file %s was truncated, reading from start", path)
                offset = 0
            handle.seek(offset)
            data = handle.read()
        complete = data[: data.rfind(b"\n") + 1] if self._follow else data
        self._offsets[path] = offset + len(complete)
        text = complete.decode("utf-8", errors="replace")
        return [line.strip() for line in text.split("\n") if line.strip()]

    def poll(self) -> list[dict[str, Any]]:
        """Return objects for lines written since the last poll."""
        batch: list[dict[str, Any]] = []
        for path in self._expand():
            if not self._follow and path in self._offsets:
                continue
            try:
                lines = self._read_new_lines(path)
            except OSError as error:
                logger.warning("cannot read %s: %s", path, error)
                continue
            batch.extend(line_to_object(line, path) for line in lines)
        return batch

    def close(self) -> None:
        self._offsets.clear()
