"""The cat, head, tail and checksum commands."""

from __future__ import annotations

import errno
import re
import sys
from typing import Any, BinaryIO, Iterable, TextIO

from ..errors import path_error
from .paths import expand_paths

TAIL_SEARCH_SIZE = 16384
DEFAULT_LINES = 10
_COPY_CHUNK = 64 * 1024


def _is_a_directory(op: str, path: str) -> OSError:
    return path_error(op, path, IsADirectoryError(errno.EISDIR, "file is a directory"))


def _copy(file: Any, out: BinaryIO, limit: int | None = None) -> None:
    remaining = limit
    while remaining is None or remaining > 0:
        size = _COPY_CHUNK if remaining is None else min(_COPY_CHUNK, remaining)
        chunk = file.read(size)
        if not chunk:
            break
        out.write(chunk)
        if remaining is not None:
            remaining -= len(chunk)


def cat(client: Any, paths: Iterable[str], out: BinaryIO) -> None:
    """Write the contents of every named file to out, one after another."""
    readers = []
    try:
        for path in expand_paths(client, paths):
            reader = client.open(path)
            readers.append(reader)
            if reader.stat().is_dir:
                raise _is_a_directory("cat", path)

        for reader in readers:
            _copy(reader, out)
    finally:
        for reader in readers:
            reader.close()


def print_section(
    client: Any,
    paths: Iterable[str],
    num_lines: int = -1,
    num_bytes: int = -1,
    from_end: bool = False,
    out: BinaryIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Write the first (or last) lines or bytes of each file to out.

    A value of -1 means the option was not given; with neither, ten lines are
    written. Files that cannot be read are reported to err and skipped.
    Returns 1 if any file was skipped, otherwise 0.
    """
    out = out if out is not None else sys.stdout.buffer
    err = err if err is not None else sys.stderr

    if num_lines != -1 and num_bytes != -1:
        raise ValueError("You can't specify both -n and -c.")
    if num_lines == -1 and num_bytes == -1:
        num_lines = DEFAULT_LINES

    expanded = expand_paths(client, paths)
    status = 0
    for path in expanded:
        try:
            reader = client.open(path)
        except OSError as exc:
            print(exc, file=err)
            status = 1
            continue

        with reader:
            if reader.stat().is_dir:
                print(_is_a_directory("open", path), file=err)
                status = 1
                continue

            if len(expanded) > 1:
                err.write(f"{reader.name()}:\n")

            if num_lines != -1:
                if from_end:
                    tail_lines(reader, num_lines, out)
                else:
                    head_lines(reader, num_lines, out)
            else:
                offset = max(0, reader.stat().size - num_bytes) if from_end else 0
                reader.seek(offset)
                _copy(reader, out, max(0, num_bytes))

    return status


def head_lines(file: Any, num_lines: int, out: BinaryIO) -> None:
    """Write the first num_lines lines of the file to out."""
    file.seek(0)
    remaining = num_lines
    while remaining > 0:
        chunk = file.read(_COPY_CHUNK)
        if not chunk:
            return
        for match in re.finditer(b"\n", chunk):
            remaining -= 1
            if remaining == 0:
                out.write(chunk[: match.end()])
                return
        out.write(chunk)


def tail_lines(file: Any, num_lines: int, out: BinaryIO) -> None:
    """Write the last num_lines lines of the file to out.

    A newline ending the file does not start a further line.
    """
    if num_lines <= 0:
        return

    size = file.stat().size
    print_offset = 0
    end = size
    while end > 0:
        start = max(0, end - TAIL_SEARCH_SIZE)
        data = file.read_at(end - start, start)
        newlines = [
            start + match.start()
            for match in re.finditer(b"\n", data)
            if start + match.start() + 1 != size
        ]

        if len(newlines) >= num_lines:
            print_offset = newlines[len(newlines) - num_lines] + 1
            break

        num_lines -= len(newlines)
        end = start

    file.seek(print_offset)
    _copy(file, out)


def checksum(client: Any, paths: Iterable[str], out: TextIO | None = None) -> None:
    """Write the hex checksum and path of every named file to out."""
    out = out if out is not None else sys.stdout
    for path in expand_paths(client, paths):
        with client.open(path) as reader:
            digest = reader.checksum()
        print(digest.hex(), path, file=out)