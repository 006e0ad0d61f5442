"""Remote exceptions and their mapping onto Python's OS errors."""

from __future__ import annotations

import errno

FILE_NOT_FOUND_EXCEPTION = "java.io.FileNotFoundException"
PERMISSION_DENIED_EXCEPTION = "org.apache.hadoop.security.AccessControlException"
PATH_IS_NOT_EMPTY_DIR_EXCEPTION = "org.apache.hadoop.fs.PathIsNotEmptyDirectoryException"
FILE_ALREADY_EXISTS_EXCEPTION = "org.apache.hadoop.fs.FileAlreadyExistsException"
ALREADY_BEING_CREATED_EXCEPTION = "org.apache.hadoop.hdfs.protocol.AlreadyBeingCreatedException"


class RemoteError(Exception):
    """A Java exception reported by a namenode or datanode."""

    def __init__(self, method: str, desc: str, exception: str, message: str = ""):
        super().__init__(method, desc, exception, message)
        self.method = method
        self.desc = desc
        self.exception = exception
        self.message = message

    def __str__(self) -> str:
        text = f"{self.method} call failed with {self.desc}"
        if self.exception:
            text += f" ({self.exception})"
        return text


def _not_exist() -> OSError:
    return FileNotFoundError(errno.ENOENT, "file does not exist")


def _permission() -> OSError:
    return PermissionError(errno.EACCES, "permission denied")


def _exist() -> OSError:
    return FileExistsError(errno.EEXIST, "file already exists")


def _not_empty() -> OSError:
    return OSError(errno.ENOTEMPTY, "directory not empty")


_EXCEPTION_MAP = {
    FILE_NOT_FOUND_EXCEPTION: _not_exist,
    PERMISSION_DENIED_EXCEPTION: _permission,
    PATH_IS_NOT_EMPTY_DIR_EXCEPTION: _not_empty,
    FILE_ALREADY_EXISTS_EXCEPTION: _exist,
}


def interpret_exception(err: BaseException | None) -> BaseException | None:
    """Map a known remote exception onto the matching OSError.

    Anything else, including None, is returned unchanged.
    """
    if isinstance(err, RemoteError):
        factory = _EXCEPTION_MAP.get(err.exception)
        if factory is not None:
            return factory()
    return err


def interpret_create_exception(err: BaseException | None) -> BaseException | None:
    """Like interpret_exception, but a file being created also means it exists."""
    if isinstance(err, RemoteError) and err.exception == ALREADY_BEING_CREATED_EXCEPTION:
        return _exist()
    return interpret_exception(err)


def _describe(err: BaseException) -> str:
    if isinstance(err, OSError) and err.strerror:
        return err.strerror
    return str(err)


class HdfsPathError(OSError):
    """An error from an operation on an HDFS path."""

    def __init__(self, op: str, path: str, err: BaseException):
        code = err.errno if isinstance(err, OSError) else None
        super().__init__(code, _describe(err), path)
        self.op = op
        self.path = path
        self.err = err

    def __str__(self) -> str:
        return f"{self.op} {self.path}: {_describe(self.err)}"


class _PathNotFoundError(HdfsPathError, FileNotFoundError):
    pass


class _PathPermissionError(HdfsPathError, PermissionError):
    pass


class _PathExistsError(HdfsPathError, FileExistsError):
    pass


def path_error(op: str, path: str, err: BaseException) -> HdfsPathError:
    """Wrap err in an HdfsPathError that is also the matching OSError subclass."""
    if isinstance(err, FileNotFoundError):
        return _PathNotFoundError(op, path, err)
    if isinstance(err, PermissionError):
        return _PathPermissionError(op, path, err)
    if isinstance(err, FileExistsError):
        return _PathExistsError(op, path, err)
    return HdfsPathError(op, path, err)