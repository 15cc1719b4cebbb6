"""Voxel coordinate file IO (one "<rl>, <fh>, <ap>" voxel per line)."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Iterator, Sequence

import numpy as np

from voxel_surface.store import CoordinateStore, MalformedRecordError

DEFAULT_INPUT_NAME = "placenta.txt"

DEFAULT_DELIMITER = ", "

# \v, \f and \x1c-\x1e are not line breaks here.
_LINE_BREAK = re.compile("\r\n|[\n\r\u2028\u2029\u0085]")


def split_lines(text: str) -> list[str]:
    """Split on \\r\\n, \\n, \\r, U+2028, U+2029 and U+0085; a final terminator adds no line."""
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def iter_voxel_lines(text: str, *, delimiter: str = DEFAULT_DELIMITER) -> Iterator[tuple[int, str, list[str]]]:
    """Yield ``(line_number, raw_line, fields)`` for each line of a voxel file.

    A single trailing newline does not produce an extra record.
    """
    for line_number, raw in enumerate(split_lines(text), start=1):
        yield line_number, raw, raw.split(delimiter)


def parse_voxel_text(text: str, *, delimiter: str = DEFAULT_DELIMITER) -> CoordinateStore:
    rows: list[list[str]] = []
    lines: list[tuple[int, str]] = []
    for line_number, raw, fields in iter_voxel_lines(text, delimiter=delimiter):
        if len(fields) != 3:
            raise MalformedRecordError(
                f"expected 3 values separated by {delimiter!r}, got {len(fields)}",
                index=line_number - 1,
                line_number=line_number,
                line=raw,
            )
        rows.append(fields)
        lines.append((line_number, raw))

    try:
        return CoordinateStore.load(rows)
    except MalformedRecordError as e:
        if e.index is None:
            raise
        line_number, raw = lines[e.index]
        raise MalformedRecordError(
            e.reason,
            index=e.index,
            line_number=line_number,
            line=raw,
        ) from e


def read_voxel_file(path: str | Path, *, delimiter: str = DEFAULT_DELIMITER) -> CoordinateStore:
    """Read a voxel coordinate text file into a CoordinateStore.

    Raises:
      FileNotFoundError: the file does not exist (or is a directory).
      MalformedRecordError: a line does not hold exactly three real values, or the
        file is not UTF-8 text.
      OSError: the file exists but cannot be read.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Voxel file not found: {p}")
    if p.is_dir():
        raise FileNotFoundError(f"Voxel file path is a directory: {p}")
    data = p.read_bytes()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        line_number = len(_LINE_BREAK.split(data[: e.start].decode("utf-8")))
        raise MalformedRecordError(
            f"not valid UTF-8 text (byte 0x{data[e.start]:02x} at offset {e.start})",
            line_number=line_number,
        ) from e
    return parse_voxel_text(text, delimiter=delimiter)


def _format_value(v: float, fmt: str) -> str:
    return fmt.format(float(v))


def write_voxel_file(
    path: str | Path,
    voxels: CoordinateStore | Iterable[Sequence[float]],
    *,
    fmt: str = "{:g}",
    delimiter: str = DEFAULT_DELIMITER,
) -> Path:
    """Write voxels in the same layout read_voxel_file expects."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(voxels, CoordinateStore):
        arr = voxels.records()
    else:
        arr = np.asarray(list(voxels), dtype=np.float64).reshape(-1, 3)

    lines = [delimiter.join(_format_value(v, fmt) for v in row) for row in arr]
    p.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    return p
