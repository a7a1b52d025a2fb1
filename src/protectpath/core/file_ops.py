"""
Single-file encrypt/decrypt operations.

These are the entry points the batch layer and the CLI call, one file per
call. They never raise for expected failures: the outcome, including the
error classification and the stage it happened in, comes back as an
:class:`OperationResult`.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Optional, Union

from ..security.crypto import decrypt_bytes, encrypt_bytes
from ..security.random import RandomSource
from ..security.secret import SecretInput
from .exceptions import ProtectPathError
from .models import ErrorKind, OperationKind, OperationResult, OperationState
from .storage import check_destination, read_source, remove_file, write_atomic

logger = logging.getLogger(__name__)

ENCRYPTED_SUFFIX = ".enc"
DECRYPTED_SUFFIX = ".dec"

PathLike = Union[str, os.PathLike]


def default_encrypt_destination(source: PathLike) -> Path:
    """``report.pdf`` -> ``report.pdf.enc``"""
    source = Path(source)
    return source.with_name(source.name + ENCRYPTED_SUFFIX)


def default_decrypt_destination(source: PathLike) -> Path:
    """``report.pdf.enc`` -> ``report.pdf``; anything else gets ``.dec`` appended."""
    source = Path(source)
    name = source.name
    if name.lower().endswith(ENCRYPTED_SUFFIX) and len(name) > len(ENCRYPTED_SUFFIX):
        return source.with_name(name[: -len(ENCRYPTED_SUFFIX)])
    return source.with_name(name + DECRYPTED_SUFFIX)


def _same_file(a: Path, b: Path) -> bool:
    try:
        return a.exists() and b.exists() and os.path.samefile(a, b)
    except OSError:
        return False


class _Tracker:
    """Moves an OperationResult through its states and logs transitions."""

    def __init__(self, result: OperationResult):
        self.result = result
        self._started = time.perf_counter()

    def advance(self, state: OperationState) -> None:
        if self.result.state.terminal:
            raise RuntimeError(f"operation already finished in state {self.result.state.value}")
        logger.debug(
            "%s %s: %s -> %s",
            self.result.operation.value,
            self.result.source,
            self.result.state.value,
            state.value,
        )
        self.result.state = state

    def complete(self) -> OperationResult:
        self.advance(OperationState.COMPLETED)
        self.result.success = True
        self.result.elapsed = time.perf_counter() - self._started
        logger.info(
            "%sed %s -> %s (%d bytes)",
            self.result.operation.value,
            self.result.source,
            self.result.destination,
            self.result.bytes_written,
        )
        return self.result

    def fail(self, exc: BaseException) -> OperationResult:
        self.result.failed_in = self.result.state
        self.result.error_kind = ErrorKind.from_exception(exc)
        self.result.error_message = str(exc)
        self.advance(OperationState.FAILED)
        self.result.success = False
        self.result.elapsed = time.perf_counter() - self._started
        logger.warning(
            "%s failed for %s during %s: %s (%s)",
            self.result.operation.value,
            self.result.source,
            self.result.failed_in.value,
            self.result.error_kind.value,
            self.result.error_message,
        )
        return self.result


def encrypt_file(
    source: PathLike,
    password: SecretInput,
    destination: Optional[PathLike] = None,
    overwrite: bool = False,
    remove_original: bool = False,
    rng: Optional[RandomSource] = None,
) -> OperationResult:
    """
    Encrypt one file into a container at ``destination``.

    ``destination`` defaults to the source path with ``.enc`` appended. With
    ``remove_original`` the source is deleted only after the destination has
    been written and fsynced; if that delete fails the result is reported as
    an IO failure even though the container exists.
    """
    src = Path(source)
    dst = Path(destination) if destination is not None else default_encrypt_destination(src)
    tracker = _Tracker(OperationResult(OperationKind.ENCRYPT, src, dst))
    result = tracker.result

    try:
        tracker.advance(OperationState.VALIDATING)
        check_destination(dst, overwrite)
        plaintext = read_source(src)
        result.bytes_read = len(plaintext)

        container = encrypt_bytes(plaintext, password, rng=rng, on_state=tracker.advance)

        tracker.advance(OperationState.WRITING)
        result.bytes_written = write_atomic(dst, container, overwrite=overwrite)

        if remove_original:
            if _same_file(src, dst):
                logger.debug("not removing %s: it is the destination", src)
            else:
                remove_file(src)
                result.source_removed = True
    except (ProtectPathError, OSError) as e:
        return tracker.fail(e)

    return tracker.complete()


def decrypt_file(
    source: PathLike,
    password: SecretInput,
    destination: Optional[PathLike] = None,
    overwrite: bool = False,
) -> OperationResult:
    """
    Decrypt one container file into ``destination``.

    ``destination`` defaults to the source with its ``.enc`` suffix removed.
    Nothing is written when the container is malformed or the password is
    wrong.
    """
    src = Path(source)
    dst = Path(destination) if destination is not None else default_decrypt_destination(src)
    tracker = _Tracker(OperationResult(OperationKind.DECRYPT, src, dst))
    result = tracker.result

    try:
        tracker.advance(OperationState.VALIDATING)
        check_destination(dst, overwrite)
        container = read_source(src)
        result.bytes_read = len(container)

        plaintext = decrypt_bytes(container, password, on_state=tracker.advance)

        tracker.advance(OperationState.WRITING)
        result.bytes_written = write_atomic(dst, plaintext, overwrite=overwrite)
    except (ProtectPathError, OSError) as e:
        return tracker.fail(e)

    return tracker.complete()
