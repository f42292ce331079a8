import os
import tempfile
from typing import Callable, BinaryIO


# ----------------------------- Atomic writes -----------------------------

def _fsync_dir(dirpath: str) -> None:
    """Best-effort directory fsync for crash-safety."""
    try:
        dirfd = os.open(dirpath, os.O_DIRECTORY)  # type: ignore[attr-defined]
    except (OSError, AttributeError):
        return
    try:
        os.fsync(dirfd)
    finally:
        os.close(dirfd)


def atomic_write(path: str, write: Callable[[BinaryIO], None],
                 validate: Callable[[BinaryIO], object] = None) -> None:
    """
    Atomically write `path`: write(f) into a temp file in the same directory,
    optionally re-read it with validate(f) (catches partial writes), then replace.
    """
    path = os.fspath(path)
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)

    fd, tmp = tempfile.mkstemp(prefix=".tmp_", dir=d or None)
    try:
        with os.fdopen(fd, "wb") as f:
            write(f)
            f.flush()
            os.fsync(f.fileno())
        if validate is not None:
            with open(tmp, "rb") as f:
                validate(f)
        os.replace(tmp, path)
        if d:
            _fsync_dir(d)
    finally:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
