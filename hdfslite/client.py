"""A client for an HDFS cluster, built on a namenode and datanode connection."""

from __future__ import annotations

import errno
import shutil
from typing import Any, Mapping

from .content_summary import ContentSummary
from .errors import interpret_create_exception, interpret_exception, path_error
from .file_reader import FileInfo, FileReader
from .file_writer import FileWriter
from .options import ClientOptions

DEFAULT_FILE_MODE = 0o644
_CREATE_FLAG_CREATE = 1


class Client:
    """A connection to an HDFS cluster.

    ``namenode`` must provide ``execute(method, request)`` returning a
    response mapping, plus ``user``, ``client_name`` and ``close()``.
    ``datanodes`` carries out block reads and writes for the files opened
    through this client.
    """

    def __init__(self, namenode: Any, options: ClientOptions | None = None, datanodes: Any = None):
        options = options if options is not None else ClientOptions()
        if options.kerberos_client is not None:
            if getattr(options.kerberos_client, "credentials", None) is None:
                raise ValueError("kerberos enabled, but kerberos client is missing credentials")
            if not options.kerberos_service_principle_name:
                raise ValueError("kerberos enabled, but kerberos namenode SPN is not provided")

        self.namenode = namenode
        self.options = options
        self.datanodes = datanodes
        self._defaults: Mapping[str, Any] | None = None

    def user(self) -> str:
        """Return the user the client acts as."""
        return self.namenode.user

    def name(self) -> str:
        """Return the unique name the client uses with namenodes and datanodes."""
        return self.namenode.client_name

    def _get_file_info(self, name: str) -> FileInfo:
        response = self.namenode.execute("getFileInfo", {"src": name})
        status = response.get("fs")
        if status is None:
            raise FileNotFoundError(errno.ENOENT, "file does not exist")
        return FileInfo.from_status(status, name)

    def stat(self, name: str) -> FileInfo:
        """Return the FileInfo for the named file or directory."""
        try:
            return self._get_file_info(name)
        except Exception as exc:
            raise path_error("stat", name, interpret_exception(exc)) from exc

    def open(self, name: str) -> FileReader:
        """Open the named file or directory for reading."""
        try:
            info = self._get_file_info(name)
        except Exception as exc:
            raise path_error("open", name, interpret_exception(exc)) from exc
        return FileReader(self, name, info)

    def read_dir(self, dirname: str) -> list[FileInfo]:
        """Return every entry of a directory, sorted by name."""
        with self.open(dirname) as reader:
            entries = reader.readdir(0)
        return sorted(entries, key=lambda info: info.name)

    def _fetch_defaults(self) -> Mapping[str, Any]:
        if self._defaults is None:
            response = self.namenode.execute("getServerDefaults", {})
            self._defaults = response.get("server_defaults") or {}
        return self._defaults

    def create(self, name: str) -> FileWriter:
        """Create a new file with the server's default replication and block size."""
        try:
            self._get_file_info(name)
        except Exception as exc:
            err = interpret_exception(exc)
            if not isinstance(err, FileNotFoundError):
                raise path_error("create", name, err) from exc
        else:
            raise path_error("create", name, FileExistsError(errno.EEXIST, "file already exists"))

        defaults = self._fetch_defaults()
        replication = int(defaults.get("replication", 0))
        block_size = int(defaults.get("block_size", 0))
        return self.create_file(name, replication, block_size, DEFAULT_FILE_MODE)

    def create_file(self, name: str, replication: int, block_size: int, perm: int) -> FileWriter:
        """Create a new file with the given replication, block size and mode."""
        request = {
            "src": name,
            "masked": {"perm": int(perm) & 0xFFFFFFFF},
            "client_name": self.namenode.client_name,
            "create_flag": _CREATE_FLAG_CREATE,
            "create_parent": False,
            "replication": int(replication),
            "block_size": int(block_size),
        }
        try:
            self.namenode.execute("create", request)
        except Exception as exc:
            raise path_error("create", name, interpret_create_exception(exc)) from exc

        return FileWriter(self, name, replication, block_size)

    def append(self, name: str) -> FileWriter:
        """Open an existing file for writing at its end."""
        try:
            self._get_file_info(name)
        except Exception as exc:
            raise path_error("append", name, interpret_exception(exc)) from exc

        request = {"src": name, "client_name": self.namenode.client_name}
        try:
            response = self.namenode.execute("append", request)
        except Exception as exc:
            raise path_error("append", name, interpret_exception(exc)) from exc

        stat = response.get("stat") or {}
        writer = FileWriter(
            self,
            name,
            int(stat.get("block_replication", 0)),
            int(stat.get("blocksize", 0)),
        )

        # No block means the file is empty or its last block is full, so
        # writing starts a fresh block.
        block = response.get("block")
        if block is not None:
            writer._resume_block(block)
        return writer

    def create_empty_file(self, name: str) -> None:
        """Create an empty file with mode 0644."""
        self.create(name).close()

    def get_content_summary(self, name: str) -> ContentSummary:
        """Return a summary of the whole tree rooted at the named path."""
        try:
            response = self.namenode.execute("getContentSummary", {"path": name})
        except Exception as exc:
            raise path_error("content summary", name, interpret_exception(exc)) from exc
        return ContentSummary(name, response.get("summary") or {})

    def read_file(self, filename: str) -> bytes:
        """Return the whole contents of the named file."""
        with self.open(filename) as reader:
            return reader.read()

    def copy_to_local(self, src: str, dst: str) -> None:
        """Copy an HDFS file to a local path, overwriting it if it exists."""
        with open(dst, "wb") as local:
            remote = self.open(src)
            try:
                shutil.copyfileobj(remote, local)
            finally:
                remote.close()

    def copy_to_remote(self, src: str, dst: str) -> None:
        """Copy a local file to a new HDFS file."""
        with open(src, "rb") as local:
            remote = self.create(dst)
            try:
                shutil.copyfileobj(local, remote)
            except BaseException:
                try:
                    remote.close()
                except Exception:
                    pass
                raise
            remote.close()

    def close(self) -> None:
        """Close the connection to the namenode."""
        self.namenode.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()