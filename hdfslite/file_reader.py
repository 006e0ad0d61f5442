"""Reading files and listing directories stored in HDFS."""

from __future__ import annotations

import errno
import hashlib
import os
import posixpath
import stat as statmod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from .errors import interpret_exception, path_error

FILE_TYPE_DIR = "IS_DIR"
FILE_TYPE_FILE = "IS_FILE"
FILE_TYPE_SYMLINK = "IS_SYMLINK"

_READ_CHUNK = 64 * 1024
_MIN_CHECKSUM_PADDING = 32


def _from_millis(millis: int) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def _decode(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="surrogateescape")
    return str(raw)


@dataclass(frozen=True)
class FileInfo:
    """Metadata for a file or directory, as reported by the namenode."""

    name: str
    size: int
    mode: int
    mod_time: datetime
    access_time: datetime
    owner: str = ""
    group: str = ""
    status: Mapping[str, Any] | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_status(cls, status: Mapping[str, Any], name: str = "") -> "FileInfo":
        """Build a FileInfo from a namenode file status mapping.

        If name is given, its last element is used as the file name;
        otherwise the status's own path is used.
        """
        if name:
            base = posixpath.basename(name.rstrip("/")) or "/"
        else:
            base = _decode(status.get("path", b""))

        file_type = status.get("file_type", FILE_TYPE_FILE)
        if file_type == FILE_TYPE_DIR:
            kind = statmod.S_IFDIR
        elif file_type == FILE_TYPE_SYMLINK:
            kind = statmod.S_IFLNK
        else:
            kind = statmod.S_IFREG

        return cls(
            name=base,
            size=int(status.get("length", 0)),
            mode=kind | (int(status.get("permission", 0)) & 0o7777),
            mod_time=_from_millis(int(status.get("modification_time", 0))),
            access_time=_from_millis(int(status.get("access_time", 0))),
            owner=str(status.get("owner", "")),
            group=str(status.get("group", "")),
            status=status,
        )

    @property
    def is_dir(self) -> bool:
        return statmod.S_ISDIR(self.mode)

    @property
    def mode_string(self) -> str:
        """The mode in the form ls -l prints it, such as drwxr-xr-x."""
        return statmod.filemode(self.mode)


class FileReader:
    """An open file or directory in HDFS, usable only for reading.

    The client must provide ``namenode.execute(method, request)`` returning a
    response mapping, and ``datanodes`` with ``open_block(block, offset)`` and
    ``read_checksum(block, deadline)``.
    """

    def __init__(self, client: Any, name: str, info: FileInfo):
        self._client = client
        self._name = name
        self._info = info
        self._blocks: list[Mapping[str, Any]] | None = None
        self._block_reader: Any = None
        self._deadline: float | None = None
        self._offset = 0
        self._readdir_last = ""
        self._closed = False

    def name(self) -> str:
        """Return the base name of the file."""
        return self._info.name

    def stat(self) -> FileInfo:
        """Return the FileInfo describing the file."""
        return self._info

    @property
    def closed(self) -> bool:
        return self._closed

    def set_deadline(self, deadline: float | None) -> None:
        """Set a deadline (a time.time() value) for reads; None means never."""
        self._deadline = deadline
        if self._block_reader is not None:
            self._block_reader.set_deadline(deadline)

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed file")

    def checksum(self) -> bytes:
        """Return HDFS's MD5-of-MD5-of-CRC32C checksum for the file."""
        if self._info.is_dir:
            raise path_error("checksum", self._name, IsADirectoryError(errno.EISDIR, "is a directory"))

        if self._blocks is None:
            self._fetch_blocks()

        # The block checksums are padded with zeroes to the next power of two
        # (at least 32 bytes) before hashing, matching 'hadoop fs -checksum'.
        padded_length = _MIN_CHECKSUM_PADDING
        total_length = 0
        digest = hashlib.md5()

        for block in self._blocks or []:
            block_checksum = self._client.datanodes.read_checksum(block, self._deadline)
            digest.update(block_checksum)
            total_length += len(block_checksum)
            if padded_length < total_length:
                padded_length *= 2

        digest.update(bytes(padded_length - total_length))
        return digest.digest()

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move to a new position; the next read starts a new block read there."""
        self._check_open()

        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._offset + offset
        elif whence == os.SEEK_END:
            target = self._info.size + offset
        else:
            raise ValueError(f"invalid whence: {whence}")

        if target < 0 or target > self._info.size:
            raise ValueError(f"invalid resulting offset: {target}")

        if target != self._offset:
            self._offset = target
            self._drop_block_reader()
        return self._offset

    def tell(self) -> int:
        return self._offset

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes, or everything left if size is negative.

        Returns an empty bytes object at the end of the file.
        """
        self._check_open()
        if self._info.is_dir:
            raise path_error("read", self._name, IsADirectoryError(errno.EISDIR, "is a directory"))

        if size is None or size < 0:
            chunks = []
            while chunk := self._read_once(_READ_CHUNK):
                chunks.append(chunk)
            return b"".join(chunks)

        return self._read_once(size)

    def _read_once(self, size: int) -> bytes:
        if self._offset >= self._info.size or size == 0:
            return b""

        if self._blocks is None:
            self._fetch_blocks()

        while True:
            if self._block_reader is None:
                self._open_block_reader()

            reader = self._block_reader
            try:
                data = reader.read(size)
            except BaseException:
                self._block_reader = None
                reader.close()
                raise

            self._offset += len(data)
            if data:
                return data

            # End of this block; move on to the next one.
            self._block_reader = None
            reader.close()

    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to size bytes starting at offset.

        The result is shorter than size only at the end of the file.
        """
        self._check_open()
        if offset < 0:
            raise path_error("readat", self._name, ValueError("negative offset"))

        self.seek(offset, os.SEEK_SET)

        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def readdir(self, n: int = 0) -> list[FileInfo]:
        """List the directory's entries in directory order.

        If n > 0, at most n entries are returned and later calls continue where
        this one stopped; an empty list means the end was reached. If n <= 0,
        every entry is returned from the start.
        """
        self._check_open()
        if not self._info.is_dir:
            raise path_error(
                "readdir", self._name, NotADirectoryError(errno.ENOTDIR, "the file is not a directory")
            )

        if n <= 0:
            self._readdir_last = ""

        result: list[FileInfo] = []
        while True:
            try:
                batch, remaining = self._list_batch()
            except Exception as exc:
                raise path_error("readdir", self._name, interpret_exception(exc)) from exc

            if batch:
                self._readdir_last = batch[-1].name

            result.extend(batch)
            if remaining == 0 or (n > 0 and len(result) >= n):
                break

        if n > 0 and len(result) > n:
            result = result[:n]
            self._readdir_last = result[-1].name

        return result

    def readdirnames(self, n: int = 0) -> list[str]:
        """Like readdir, but return only the entry names."""
        self._check_open()
        return [info.name for info in self.readdir(n)]

    def close(self) -> None:
        self._closed = True
        self._drop_block_reader()

    def __enter__(self) -> "FileReader":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _drop_block_reader(self) -> None:
        if self._block_reader is not None:
            reader, self._block_reader = self._block_reader, None
            reader.close()

    def _list_batch(self) -> tuple[list[FileInfo], int]:
        request = {
            "src": self._name,
            "start_after": self._readdir_last.encode("utf-8", errors="surrogateescape"),
            "need_location": False,
        }
        response = self._client.namenode.execute("getListing", request)
        dir_list = response.get("dir_list")
        if dir_list is None:
            raise FileNotFoundError(errno.ENOENT, "file does not exist")

        entries = [FileInfo.from_status(status) for status in dir_list.get("partial_listing", [])]
        return entries, int(dir_list.get("remaining_entries", 0))

    def _fetch_blocks(self) -> None:
        request = {"src": self._name, "offset": 0, "length": self._info.size}
        response = self._client.namenode.execute("getBlockLocations", request)
        locations = response.get("locations") or {}
        self._blocks = list(locations.get("blocks", []))

    def _open_block_reader(self) -> None:
        offset = self._offset
        for block in self._blocks or []:
            start = int(block["offset"])
            end = start + int(block["num_bytes"])
            if start <= offset < end:
                self._block_reader = self._client.datanodes.open_block(block, offset - start)
                self.set_deadline(self._deadline)
                return

        raise OSError("invalid offset")