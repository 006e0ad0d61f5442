"""The hdfs command line tool: argument parsing and command dispatch."""

from __future__ import annotations

import getopt
import getpass
import os
import socket
import sys
from importlib import metadata
from typing import Any, BinaryIO, Callable, Sequence, TextIO

from ..hadoopconf import load_from_environment
from ..options import ClientOptions, client_options_from_conf
from .cat import cat, checksum, print_section
from .complete import complete
from .paths import normalize_paths

DIAL_TIMEOUT = 5.0

NO_NAMENODE_MESSAGE = (
    "Couldn't find a namenode to connect to. You should specify "
    "hdfs://<namenode>:<port> in your paths. Alternatively, set "
    "HADOOP_NAMENODE or HADOOP_CONF_DIR in your environment."
)

_USAGE = """Usage: {prog} COMMAND
The flags available are a subset of the POSIX ones, but should behave similarly.

Valid commands:
  cat SOURCE...
  head [-n LINES | -c BYTES] SOURCE...
  tail [-n LINES | -c BYTES] SOURCE...
  checksum FILE...
"""

ClientFactory = Callable[[str], Any]


class CommandError(Exception):
    """A fatal error: its message is printed and the tool exits with status 1."""


class _HelpRequested(Exception):
    """The usage text should be printed and the tool should exit successfully."""


def _usage() -> str:
    return _USAGE.format(prog=sys.argv[0] if sys.argv and sys.argv[0] else "hdfs")


def _version() -> str:
    try:
        return metadata.version("hdfslite")
    except metadata.PackageNotFoundError:
        return "unknown"


def _dial(address: str) -> socket.socket:
    """Connect to host:port with the tool's default timeout and keepalive."""
    host, _, port = address.rpartition(":")
    sock = socket.create_connection((host.strip("[]"), int(port)), timeout=DIAL_TIMEOUT)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    return sock


def _connect(options: ClientOptions) -> Any:
    raise ConnectionError(
        "no namenode transport is available for " + ", ".join(options.addresses)
    )


class _ClientCache:
    """Builds clients from the environment and keeps one per namenode."""

    def __init__(self, connect: Callable[[ClientOptions], Any]):
        self._connect = connect
        self._clients: dict[str, Any] = {}

    def __call__(self, namenode: str = "") -> Any:
        key = namenode
        if key in self._clients:
            return self._clients[key]

        if not namenode:
            namenode = os.environ.get("HADOOP_NAMENODE", "")

        try:
            conf = load_from_environment()
        except (OSError, ValueError) as exc:
            raise CommandError(f"Problem loading configuration: {exc}") from exc

        options = client_options_from_conf(conf)
        if namenode:
            options.addresses = [namenode]

        if not options.addresses:
            raise CommandError(NO_NAMENODE_MESSAGE)

        # With Kerberos enabled the placeholder client is passed on as is;
        # connecting then fails unless real credentials are supplied.
        if options.kerberos_client is None:
            options.user = os.environ.get("HADOOP_USER_NAME", "")
            if not options.user:
                try:
                    options.user = getpass.getuser()
                except Exception as exc:
                    raise CommandError(f"Couldn't determine user: {exc}") from exc

        options.namenode_dial_func = _dial
        options.datanode_dial_func = _dial

        try:
            client = self._connect(options)
        except Exception as exc:
            raise CommandError(f"Couldn't connect to namenode: {exc}") from exc

        self._clients[key] = client
        return client


def _binary(stream: TextIO) -> BinaryIO:
    stream.flush()
    return stream.buffer


def _client_and_paths(paths: Sequence[str], client_factory: ClientFactory) -> tuple[Any, list[str]]:
    normalized, namenode = normalize_paths(paths)
    return client_factory(namenode), normalized


def _parse_head_tail(args: Sequence[str]) -> tuple[int, int, list[str]]:
    try:
        opts, rest = getopt.getopt(list(args), "n:c:")
        num_lines = num_bytes = -1
        for flag, value in opts:
            if flag == "-n":
                num_lines = int(value)
            else:
                num_bytes = int(value)
    except (getopt.GetoptError, ValueError) as exc:
        raise _HelpRequested() from exc
    return num_lines, num_bytes, rest


def _dispatch(argv: Sequence[str], client_factory: ClientFactory, stdout: TextIO, stderr: TextIO) -> int:
    if not argv:
        raise _HelpRequested()

    command = argv[0]
    if command in ("-v", "--version"):
        raise CommandError(f"hdfslite version {_version()}")

    if command == "cat":
        client, paths = _client_and_paths(argv[1:], client_factory)
        cat(client, paths, _binary(stdout))
        return 0

    if command in ("head", "tail"):
        num_lines, num_bytes, rest = _parse_head_tail(argv[1:])
        if num_lines != -1 and num_bytes != -1:
            raise CommandError("You can't specify both -n and -c.")
        client, paths = _client_and_paths(rest, client_factory)
        return print_section(
            client, paths, num_lines, num_bytes, command == "tail", _binary(stdout), stderr
        )

    if command == "checksum":
        client, paths = _client_and_paths(argv[1:], client_factory)
        checksum(client, paths, stdout)
        return 0

    if command == "complete":
        complete(argv, client_factory, stdout)
        return 0

    if command in ("help", "-h", "-help", "--help"):
        raise _HelpRequested()

    raise CommandError(f"Unknown command: {command} \n{_usage()}")


def _run(
    argv: Sequence[str],
    client_factory: ClientFactory,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Run one command and return the exit status."""
    try:
        status = _dispatch(argv, client_factory, stdout, stderr)
    except _HelpRequested:
        print(_usage(), file=stderr)
        return 0
    except (CommandError, OSError, ValueError) as exc:
        print(exc, file=stderr)
        return 1
    stdout.flush()
    return status


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line tool and return its exit status."""
    if argv is None:
        argv = sys.argv[1:]
    return _run(list(argv), _ClientCache(_connect), sys.stdout, sys.stderr)


if __name__ == "__main__":
    sys.exit(main())