"""Normalising, and expanding globs in, the paths given on the command line."""

from __future__ import annotations

import errno
import posixpath
import re
from typing import Any, Iterable
from urllib.parse import unquote, urlsplit

from ..errors import path_error

_GLOB_RE = re.compile(r"([^\\]|^)[[*?]")


class MultipleNamenodeUrlsError(ValueError):
    """Paths named more than one namenode."""

    def __init__(self, message: str = "Multiple namenode URLs specified"):
        super().__init__(message)


def _clean(path: str) -> str:
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join(*elements: str) -> str:
    parts = [element for element in elements if element]
    if not parts:
        return ""
    return _clean("/".join(parts))


def user_dir(client: Any) -> str:
    """Return the home directory of the client's user."""
    return _join("/user", client.user())


def normalize_paths(paths: Iterable[str]) -> tuple[list[str], str]:
    """Split namenode hosts out of HDFS URLs and clean the paths.

    Returns the cleaned paths and the namenode named by them ("" if none).
    Raises MultipleNamenodeUrlsError if the URLs name different hosts.
    """
    namenode = ""
    clean_paths = []

    for raw in paths:
        parsed = urlsplit(raw)
        host = parsed.netloc.rpartition("@")[2]
        if host:
            if namenode and namenode != host:
                raise MultipleNamenodeUrlsError()
            namenode = host

        clean_paths.append(_clean(unquote(parsed.path)))

    return clean_paths, namenode


def has_glob(fragment: str) -> bool:
    """Report whether the fragment holds an unescaped glob character."""
    return _GLOB_RE.search(fragment) is not None


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise ValueError("syntax error in pattern")
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise ValueError("syntax error in pattern")
    return pattern[i], i + 1


def _glob_regex(pattern: str) -> re.Pattern:
    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        i += 1
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "\\":
            if i >= len(pattern):
                raise ValueError("syntax error in pattern")
            parts.append(re.escape(pattern[i]))
            i += 1
        elif char == "[":
            negate = i < len(pattern) and pattern[i] == "^"
            if negate:
                i += 1
            ranges = []
            count = 0
            while True:
                if count > 0 and i < len(pattern) and pattern[i] == "]":
                    i += 1
                    break
                lo, i = _class_char(pattern, i)
                hi = lo
                if i < len(pattern) and pattern[i] == "-":
                    hi, i = _class_char(pattern, i + 1)
                count += 1
                if lo <= hi:
                    ranges.append(re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}")
            if ranges:
                parts.append(f"[{'^' if negate else ''}{''.join(ranges)}]")
            else:
                parts.append("[^/]" if negate else "(?!)")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def _match(pattern: str, name: str) -> bool:
    try:
        return _glob_regex(pattern).fullmatch(name) is not None
    except (ValueError, re.error):
        return False


def expand_globs(client: Any, globbed_path: str) -> list[str]:
    """Expand the globs in a cleaned, absolute path against the filesystem."""
    parts = globbed_path.split("/")[1:]
    split_at = next((i for i, part in enumerate(parts) if has_glob(part)), len(parts) - 1)

    base = "/" + _join(*parts[:split_at])
    glob = parts[split_at]
    following = parts[split_at + 1] if len(parts) > split_at + 1 else ""
    remainder = _join(*parts[split_at + 2:])

    result = []
    for info in client.read_dir(base):
        if not _match(glob, info.name):
            continue

        new_path = _join(base, info.name, following, remainder)
        if has_glob(new_path):
            if info.is_dir:
                result.extend(expand_globs(client, new_path))
        else:
            try:
                client.stat(new_path)
            except FileNotFoundError:
                continue
            result.append(new_path)

    return result


def expand_paths(client: Any, paths: Iterable[str]) -> list[str]:
    """Make paths absolute under the user's home and expand any globs.

    A glob that matches nothing raises FileNotFoundError.
    """
    result = []
    home = user_dir(client)

    for path in paths:
        if not path.startswith("/"):
            path = _join(home, path)

        if has_glob(path):
            expanded = expand_globs(client, path)
            if not expanded:
                raise path_error("stat", path, FileNotFoundError(errno.ENOENT, "file does not exist"))
            result.extend(expanded)
        else:
            result.append(path)

    return result