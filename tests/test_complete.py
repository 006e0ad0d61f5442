import io
import posixpath

import pytest

from hdfslite.cli.complete import complete, complete_arg, complete_path, count_position, is_known_command
from hdfslite.client import Client


class FakeNamenode:
    user = "alice"
    client_name = "test-client"

    def __init__(self, files, dirs=()):
        self.files = dict(files)
        self.dirs = {"/"}
        for path in [*self.files, *dirs]:
            parent = posixpath.dirname(path)
            while parent not in self.dirs:
                self.dirs.add(parent)
                parent = posixpath.dirname(parent)
        self.dirs.update(dirs)

    def _status(self, path, name):
        if path in self.dirs:
            return {"path": name.encode(), "file_type": "IS_DIR", "length": 0, "permission": 0o755}
        return {"path": name.encode(), "file_type": "IS_FILE", "length": len(self.files[path])}

    def execute(self, method, request):
        src = request["src"].rstrip("/") or "/"
        if method == "getFileInfo":
            if src in self.dirs or src in self.files:
                return {"fs": self._status(src, posixpath.basename(src))}
            return {}
        if method == "getListing":
            after = request["start_after"].decode()
            names = sorted(
                posixpath.basename(p)
                for p in [*self.dirs, *self.files]
                if p != "/" and posixpath.dirname(p) == src
            )
            listing = [self._status(posixpath.join(src, n), n) for n in names if n > after]
            return {"dir_list": {"partial_listing": listing, "remaining_entries": 0}}
        raise AssertionError(method)

    def close(self):
        pass


@pytest.fixture
def factory():
    client = Client(FakeNamenode({"/data/a.txt": b"a", "/data/sub/x": b"x", "/data/b.txt": b"b"}))
    requested = []

    def make(namenode):
        requested.append(namenode)
        return client

    make.requested = requested
    return make


def failing_factory(namenode):
    raise ConnectionError("no namenode")


def test_complete_without_line_lists_commands(factory):
    out = io.StringIO()
    complete(["complete"], factory, out)
    words = out.getvalue().split()
    assert out.getvalue().endswith("\n")
    assert "ls" in words and "getmerge" in words and "df" in words
    assert all(is_known_command(word) for word in words)


def test_complete_with_only_program_lists_commands(factory):
    out = io.StringIO()
    complete(["complete", "hdfs ls"], factory, out)
    assert "checksum" in out.getvalue().split()


def test_complete_directory_listing(factory):
    out = io.StringIO()
    complete(["complete", "hdfs ls /data/"], factory, out)
    assert out.getvalue() == " /data/a.txt /data/b.txt /data/sub/\n"
    assert factory.requested == [""]


def test_complete_prefix(factory):
    out = io.StringIO()
    complete_path("/data/s", factory, out)
    assert out.getvalue() == " /data/sub/\n"


def test_complete_namenode_from_url(factory):
    out = io.StringIO()
    complete_path("hdfs://nn:8020/data/a", factory, out)
    assert out.getvalue() == " /data/a.txt\n"
    assert factory.requested == ["nn:8020"]


def test_complete_put_first_argument_is_local(factory):
    out = io.StringIO()
    complete(["complete", "hdfs put lo"], factory, out)
    assert out.getvalue() == "_FILE_\n"


def test_complete_get_second_argument_is_local(factory):
    out = io.StringIO()
    complete_arg("get", "x", 2, factory, out)
    assert out.getvalue() == "_FILE_\n"


def test_complete_chmod_mode_prints_nothing(factory):
    out = io.StringIO()
    complete_arg("chmod", "/data/", 1, factory, out)
    assert out.getvalue() == ""
    assert factory.requested == []


def test_complete_flag_prints_nothing(factory):
    out = io.StringIO()
    complete_arg("ls", "-l", 1, factory, out)
    assert out.getvalue() == ""


def test_complete_glob_prints_nothing(factory):
    out = io.StringIO()
    complete_path("/data/*", factory, out)
    assert out.getvalue() == ""


def test_complete_unknown_command_prints_nothing(factory):
    out = io.StringIO()
    complete(["complete", "hdfs frobnicate /data/"], factory, out)
    assert out.getvalue() == ""


def test_complete_client_failure_prints_nothing():
    out = io.StringIO()
    complete_path("/data/", failing_factory, out)
    assert out.getvalue() == ""


def test_complete_missing_directory_prints_nothing(factory):
    out = io.StringIO()
    complete_path("/nowhere/", factory, out)
    assert out.getvalue() == ""


@pytest.mark.parametrize(
    "words, expected",
    [(["ls", "foo"], 1), (["ls", "-l", "foo"], 1), (["mv", "a", "b"], 2), (["ls", "-l"], 0)],
)
def test_count_position(words, expected):
    assert count_position(words) == expected


def test_is_known_command():
    assert is_known_command("put") is True
    assert is_known_command("cp") is False