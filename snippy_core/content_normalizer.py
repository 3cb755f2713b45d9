"""Turn a snippet file's bytes into the literal payload that gets typed or copied."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List
import os
import tempfile

BOM = b"\xef\xbb\xbf"
HEADER_OPEN = b"---"
HEADER_CLOSE = (b"---", b"...")


def _split_lines(data: bytes) -> List[bytes]:
    """Split into lines that keep their `\\n`; a final unterminated line has none."""
    parts = data.split(b"\n")
    tail = parts.pop()
    lines = [part + b"\n" for part in parts]
    if tail:
        lines.append(tail)
    return lines


def _body(line: bytes) -> bytes:
    return line[:-1] if line.endswith(b"\n") else line


def _strip_cr(line: bytes) -> bytes:
    if line.endswith(b"\n"):
        return _body(line).rstrip(b"\r") + b"\n"
    return line.rstrip(b"\r")


def _is_blank(line: bytes) -> bool:
    return not line.strip()


def strip_front_matter(lines: List[bytes]) -> List[bytes]:
    """Drop a leading `---` block closed by `---` or `...`.

    An unterminated block is left in place.
    """
    if not lines or _body(lines[0]).rstrip() != HEADER_OPEN:
        return lines
    for index in range(1, len(lines)):
        if _body(lines[index]).rstrip() in HEADER_CLOSE:
            return lines[index + 1:]
    return lines


def trim_blank_lines(lines: List[bytes]) -> List[bytes]:
    start, end = 0, len(lines)
    while start < end and _is_blank(lines[start]):
        start += 1
    while end > start and _is_blank(lines[end - 1]):
        end -= 1
    return lines[start:end]


def normalize(data: bytes) -> bytes:
    if data.startswith(BOM):
        data = data[len(BOM):]
    lines = [_strip_cr(line) for line in _split_lines(data)]
    lines = strip_front_matter(lines)
    return b"".join(trim_blank_lines(lines))


@contextmanager
def staged_payload(data: bytes) -> Iterator[Path]:
    """Hold `data` in a private temp file for the duration of the block.

    The file is removed on every exit path, including exceptions.
    """
    fd, name = tempfile.mkstemp(prefix="snippy.")
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        yield path
    finally:
        path.unlink(missing_ok=True)
