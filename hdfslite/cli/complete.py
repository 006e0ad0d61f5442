"""Shell completion for the command line tool."""

from __future__ import annotations

import posixpath
import sys
from typing import Any, Callable, Sequence, TextIO

from .paths import has_glob, normalize_paths, user_dir

KNOWN_COMMANDS = (
    "ls",
    "rm",
    "mv",
    "mkdir",
    "touch",
    "chmod",
    "chown",
    "cat",
    "head",
    "tail",
    "du",
    "checksum",
    "get",
    "getmerge",
    "put",
    "df",
)

# The shell completion script treats this as a request for local files.
FILE_MARKER = "_FILE_"
_READDIR_BATCH = 1000

ClientFactory = Callable[[str], Any]


def complete(args: Sequence[str], client_factory: ClientFactory, out: TextIO | None = None) -> None:
    """Print completions for the command line in args[1].

    args is the argument list after the program name, starting with the
    completion command itself.
    """
    out = out if out is not None else sys.stdout
    if len(args) == 2:
        words = args[1].split(" ")[1:]
        if len(words) <= 1:
            print(" ".join(KNOWN_COMMANDS), file=out)
        elif is_known_command(words[0]):
            complete_arg(words[0], words[-1], count_position(words), client_factory, out)
    else:
        print(" ".join(KNOWN_COMMANDS), file=out)


def complete_arg(
    command: str,
    fragment: str,
    position: int,
    client_factory: ClientFactory,
    out: TextIO | None = None,
) -> None:
    """Print completions for one argument of a known command."""
    out = out if out is not None else sys.stdout
    if (command == "put" and position == 1) or (command in ("get", "getmerge") and position == 2):
        print(FILE_MARKER, file=out)
    elif command in ("chmod", "chown") and position == 1:
        return
    elif not fragment.startswith("-"):
        complete_path(fragment, client_factory, out)


def complete_path(fragment: str, client_factory: ClientFactory, out: TextIO | None = None) -> None:
    """Print the HDFS paths that start with fragment; print nothing on error."""
    out = out if out is not None else sys.stdout
    try:
        paths, namenode = normalize_paths([fragment])
    except ValueError:
        return

    try:
        client = client_factory(namenode)
    except Exception:
        return

    full_path = paths[0]
    if full_path == "":
        full_path = user_dir(client) + "/"
    elif has_glob(full_path):
        return

    if fragment.endswith("/"):
        directory, prefix = full_path, ""
    else:
        head, sep, prefix = full_path.rpartition("/")
        directory = head + sep

    try:
        reader = client.open(directory)
    except OSError:
        return

    matches = []
    with reader:
        while True:
            try:
                batch = reader.readdir(_READDIR_BATCH)
            except OSError:
                return
            if not batch:
                break
            for info in batch:
                if info.name.startswith(prefix):
                    path = posixpath.normpath(posixpath.join(directory, info.name))
                    matches.append(path + "/" if info.is_dir else path)

    out.write("".join(" " + path for path in matches) + "\n")


def is_known_command(command: str) -> bool:
    """Report whether command is one the tool understands."""
    return command in KNOWN_COMMANDS


def count_position(words: Sequence[str]) -> int:
    """Return the position of the last word among the non-flag arguments."""
    return sum(1 for word in words if not word.startswith("-")) - 1