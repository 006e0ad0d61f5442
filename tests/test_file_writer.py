import pytest

from hdfslite.errors import HdfsPathError, RemoteError
from hdfslite.file_writer import FileWriter


class FakeBlockWriter:
    def __init__(self, block, block_size, offset, append):
        self.block = block
        self.capacity = block_size
        self.offset = offset
        self.append = append
        self.data = bytearray()
        self.deadline = None
        self.closed = False
        self.flushes = 0

    def write(self, data):
        room = self.capacity - self.offset
        chunk = bytes(data[:room])
        self.data += chunk
        self.offset += len(chunk)
        return len(chunk)

    def flush(self):
        self.flushes += 1

    def close(self):
        self.closed = True

    def set_deadline(self, deadline):
        self.deadline = deadline


class FakeDatanodes:
    def __init__(self):
        self.writers = []

    def open_block_writer(self, block, block_size, offset, append):
        writer = FakeBlockWriter(block, block_size, offset, append)
        self.writers.append(writer)
        return writer


class FakeNamenode:
    client_name = "client-1"

    def __init__(self):
        self.calls = []
        self.errors = {}
        self._next_id = 0

    def execute(self, method, request):
        self.calls.append((method, request))
        if method in self.errors:
            raise self.errors[method]
        if method == "addBlock":
            self._next_id += 1
            return {"block": {"b": {"block_id": self._next_id, "num_bytes": 0}}}
        return {}

    def requests(self, method):
        return [req for name, req in self.calls if name == method]


class FakeClient:
    def __init__(self):
        self.namenode = FakeNamenode()
        self.datanodes = FakeDatanodes()


@pytest.fixture
def client():
    return FakeClient()


def test_write_and_close(client):
    writer = FileWriter(client, "/_test/create/1.txt", 3, 1024)
    assert writer.write(b"foo") == 3
    assert writer.write(b"bar") == 3
    writer.close()

    assert len(client.datanodes.writers) == 1
    assert bytes(client.datanodes.writers[0].data) == b"foobar"
    assert client.datanodes.writers[0].closed
    complete = client.namenode.requests("complete")
    assert complete == [
        {
            "src": "/_test/create/1.txt",
            "client_name": "client-1",
            "last": {"block_id": 1, "num_bytes": 6},
        }
    ]
    assert writer.closed


def test_write_spans_blocks(client):
    writer = FileWriter(client, "/f", 1, 4)
    assert writer.write(b"abcdefghij") == 10
    writer.close()

    assert [bytes(w.data) for w in client.datanodes.writers] == [b"abcd", b"efgh", b"ij"]
    previous = [req["previous"] for req in client.namenode.requests("addBlock")]
    assert previous == [
        None,
        {"block_id": 1, "num_bytes": 4},
        {"block_id": 2, "num_bytes": 4},
    ]
    updates = [req["block"] for req in client.namenode.requests("updateBlockForPipeline")]
    assert updates[-1] == {"block_id": 3, "num_bytes": 2}
    assert client.namenode.requests("complete")[0]["last"] == {"block_id": 3, "num_bytes": 2}


def test_close_empty_file_adds_no_block(client):
    writer = FileWriter(client, "/empty", 1, 1024)
    writer.close()
    assert client.namenode.requests("addBlock") == []
    assert client.namenode.requests("complete")[0]["last"] is None


def test_write_after_close_raises(client):
    writer = FileWriter(client, "/f", 1, 1024)
    writer.close()
    with pytest.raises(ValueError):
        writer.write(b"x")
    with pytest.raises(ValueError):
        writer.flush()


def test_close_twice_completes_once(client):
    writer = FileWriter(client, "/f", 1, 1024)
    writer.write(b"x")
    writer.close()
    writer.close()
    assert len(client.namenode.requests("complete")) == 1


def test_flush_forwards_to_block_writer(client):
    writer = FileWriter(client, "/f", 1, 1024)
    writer.flush()
    assert client.datanodes.writers == []
    writer.write(b"abc")
    writer.flush()
    writer.flush()
    assert client.datanodes.writers[0].flushes == 2


def test_deadline_is_passed_to_block_writers(client):
    writer = FileWriter(client, "/f", 1, 2)
    writer.set_deadline(123.0)
    writer.write(b"abc")
    assert [w.deadline for w in client.datanodes.writers] == [123.0, 123.0]
    writer.set_deadline(456.0)
    assert client.datanodes.writers[-1].deadline == 456.0


def test_add_block_permission_denied(client):
    client.namenode.errors["addBlock"] = RemoteError(
        "addBlock", "ERROR", "org.apache.hadoop.security.AccessControlException"
    )
    writer = FileWriter(client, "/_test/accessdenied/f", 1, 1024)
    with pytest.raises(PermissionError) as info:
        writer.write(b"foo")
    assert isinstance(info.value, HdfsPathError)
    assert info.value.op == "create"
    assert info.value.path == "/_test/accessdenied/f"


def test_complete_error_is_wrapped(client):
    remote = RemoteError("complete", "ERROR", "java.io.IOException")
    client.namenode.errors["complete"] = remote
    writer = FileWriter(client, "/f", 1, 1024)
    with pytest.raises(HdfsPathError) as info:
        writer.close()
    assert info.value.op == "create"
    assert info.value.err is remote
    assert not writer.closed


def test_resume_block_appends_at_offset(client):
    writer = FileWriter(client, "/append", 1, 10)
    writer._resume_block({"b": {"block_id": 7, "num_bytes": 7}})
    assert writer.write(b"foobar") == 6
    writer.close()

    first = client.datanodes.writers[0]
    assert first.append is True
    assert bytes(first.data) == b"foo"
    assert bytes(client.datanodes.writers[1].data) == b"bar"
    assert client.namenode.requests("addBlock")[0]["previous"] == {"block_id": 7, "num_bytes": 10}


def test_context_manager_closes(client):
    with FileWriter(client, "/ctx", 1, 1024) as writer:
        writer.write(b"hello")
    assert writer.closed
    assert client.namenode.requests("complete")[0]["last"]["num_bytes"] == 5