"""
Destination writes for encrypted and decrypted files

Every output goes through a temporary file in the destination directory that
is flushed, fsynced and then moved into place, so a reader never sees a half
written destination. When overwrite is off the final step uses a hard link,
which fails if something appeared at the destination in the meantime.
"""

import errno
import logging
import os
import tempfile
from pathlib import Path

from .exceptions import FileAccessError, OverwriteConflictError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536  # 64KB


def read_source(path: Path) -> bytes:
    """Read a whole source file, mapping OS errors to FileAccessError."""
    try:
        if not path.is_file():
            raise FileAccessError(f"Source is not a readable file: {path}")
        chunks = []
        with open(path, "rb") as f:
            while True:
                data = f.read(CHUNK_SIZE)
                if not data:
                    break
                chunks.append(data)
        return b"".join(chunks)
    except OSError as e:
        raise FileAccessError(f"Cannot read {path}: {e.strerror or e}") from e


def check_destination(path: Path, overwrite: bool) -> None:
    """Fail early when the destination exists and overwrite is off."""
    if path.exists() and not overwrite:
        raise OverwriteConflictError(f"Destination already exists: {path}")
    if path.is_dir():
        raise FileAccessError(f"Destination is a directory: {path}")


def _fsync_dir(directory: Path) -> None:
    # directory fsync makes the rename durable; not available on Windows
    if not hasattr(os, "O_DIRECTORY"):
        return
    fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(fd)
    except OSError as e:
        if e.errno != errno.EINVAL:
            raise
    finally:
        os.close(fd)


def _publish(tmp_path: Path, destination: Path, overwrite: bool) -> None:
    if overwrite:
        os.replace(tmp_path, destination)
        return
    try:
        os.link(tmp_path, destination)
    except FileExistsError as e:
        raise OverwriteConflictError(f"Destination already exists: {destination}") from e
    except OSError as e:
        # filesystems without hard links
        if e.errno not in (errno.EPERM, errno.ENOTSUP, errno.EOPNOTSUPP, errno.EXDEV):
            raise
        if destination.exists():
            raise OverwriteConflictError(f"Destination already exists: {destination}") from e
        os.replace(tmp_path, destination)
        return
    tmp_path.unlink()


def write_atomic(destination: Path, data: bytes, overwrite: bool = False) -> int:
    """
    Write ``data`` to ``destination`` atomically and durably.

    Returns the number of bytes written. Raises OverwriteConflictError or
    FileAccessError; on failure the destination is left untouched and the
    temporary file is removed.
    """
    destination = Path(destination)
    check_destination(destination, overwrite)
    parent = destination.parent

    try:
        with tempfile.NamedTemporaryFile(
            dir=parent, prefix=f".{destination.name}.", suffix=".tmp", delete=False
        ) as tmpf:
            tmp_path = Path(tmpf.name)
    except OSError as e:
        raise FileAccessError(f"Cannot write to {parent}: {e.strerror or e}") from e

    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        _publish(tmp_path, destination, overwrite)
        _fsync_dir(parent)
    except OverwriteConflictError:
        raise
    except OSError as e:
        raise FileAccessError(f"Cannot write {destination}: {e.strerror or e}") from e
    finally:
        try:
            tmp_path.unlink()
        except FileNotFoundError:
            pass

    logger.debug("wrote %d bytes to %s", len(data), destination)
    return len(data)


def remove_file(path: Path) -> None:
    try:
        path.unlink()
    except OSError as e:
        raise FileAccessError(f"Cannot remove {path}: {e.strerror or e}") from e
