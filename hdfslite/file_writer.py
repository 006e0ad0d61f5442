"""Writing new files and appending to existing ones in HDFS."""

from __future__ import annotations

from typing import Any, Mapping

from .errors import interpret_exception, path_error


class FileWriter:
    """An open file in HDFS, usable only for writing.

    Data is buffered and acknowledged by the datanodes asynchronously, so
    close must be called once everything has been written.

    The client must provide ``namenode.execute(method, request)`` returning a
    response mapping, ``namenode.client_name``, and ``datanodes`` with
    ``open_block_writer(block, block_size, offset, append)``. A block writer
    has ``write(data)`` (returning how many bytes fit in the block; fewer than
    given means the block is full), ``flush()``, ``close()``,
    ``set_deadline(deadline)`` and an ``offset`` attribute.
    """

    def __init__(self, client: Any, name: str, replication: int, block_size: int):
        self._client = client
        self._name = name
        self._replication = replication
        self._block_size = block_size
        self._block: Mapping[str, Any] | None = None
        self._block_writer: Any = None
        self._deadline: float | None = None
        self._closed = False

    @property
    def replication(self) -> int:
        return self._replication

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def closed(self) -> bool:
        return self._closed

    def set_deadline(self, deadline: float | None) -> None:
        """Set a deadline (a time.time() value) for writes, flushes and close.

        None means those calls never time out. Because of buffering, writes
        that do not reach the network may still succeed after the deadline.
        """
        self._deadline = deadline
        if self._block_writer is not None:
            self._block_writer.set_deadline(deadline)

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed file")

    def write(self, data: bytes) -> int:
        """Write data to the file, starting new blocks as they fill up."""
        self._check_open()

        if self._block_writer is None:
            self._start_new_block()

        view = memoryview(data)
        written = 0
        while written < len(view):
            written += self._block_writer.write(view[written:])
            if written < len(view):
                self._start_new_block()

        return written

    def flush(self) -> None:
        """Send any buffered data out to the datanodes."""
        self._check_open()
        if self._block_writer is not None:
            self._block_writer.flush()

    def close(self) -> None:
        """Write out remaining data, wait for acknowledgements and complete the file."""
        if self._closed:
            return

        last_block = None
        if self._block_writer is not None:
            last_block = self._finalize_block()

        request = {
            "src": self._name,
            "client_name": self._client.namenode.client_name,
            "last": last_block,
        }
        try:
            self._client.namenode.execute("complete", request)
        except Exception as exc:
            raise path_error("create", self._name, exc) from exc

        self._closed = True

    def __enter__(self) -> "FileWriter":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _resume_block(self, block: Mapping[str, Any]) -> None:
        """Continue writing into a partly filled block, as when appending."""
        offset = int(block["b"].get("num_bytes", 0))
        self._open_block_writer(block, offset, append=True)

    def _open_block_writer(self, block: Mapping[str, Any], offset: int, append: bool) -> None:
        self._block = block
        self._block_writer = self._client.datanodes.open_block_writer(
            block, self._block_size, offset, append
        )
        self._block_writer.set_deadline(self._deadline)

    def _start_new_block(self) -> None:
        previous = self._finalize_block() if self._block_writer is not None else None

        request = {
            "src": self._name,
            "client_name": self._client.namenode.client_name,
            "previous": previous,
        }
        try:
            response = self._client.namenode.execute("addBlock", request)
        except Exception as exc:
            raise path_error("create", self._name, interpret_exception(exc)) from exc

        self._open_block_writer(response["block"], 0, append=False)

    def _finalize_block(self) -> dict[str, Any]:
        """Close the current block and report its final length to the namenode."""
        writer = self._block_writer
        writer.close()

        last_block = dict(self._block["b"])
        last_block["num_bytes"] = int(writer.offset)
        request = {
            "block": last_block,
            "client_name": self._client.namenode.client_name,
        }
        self._client.namenode.execute("updateBlockForPipeline", request)

        self._block_writer = None
        self._block = None
        return last_block