"""
Run many single-file operations on a bounded thread pool.

Work items are independent: each one draws its own salt and IV and derives
its own key, so they can run in any order. PBKDF2 and AES run inside OpenSSL
with the GIL released, which is why threads are enough here.

Cancellation is checked only before an item starts; an item that is already
deriving or writing always runs to a terminal state.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from ..security.secret import SecretInput
from .file_ops import (
    decrypt_file,
    default_decrypt_destination,
    default_encrypt_destination,
    encrypt_file,
)
from .models import ErrorKind, OperationKind, OperationResult, OperationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    source: Path
    destination: Optional[Path] = None


@dataclass
class BatchReport:
    results: List[OperationResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[OperationResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[OperationResult]:
        return [r for r in self.results if not r.success]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return f"{len(self.succeeded)} succeeded, {len(self.failed)} failed, {len(self.results)} total"


def _cancelled(kind: OperationKind, item: WorkItem) -> OperationResult:
    if item.destination is not None:
        destination = Path(item.destination)
    elif kind is OperationKind.ENCRYPT:
        destination = default_encrypt_destination(item.source)
    else:
        destination = default_decrypt_destination(item.source)
    return OperationResult(
        operation=kind,
        source=Path(item.source),
        destination=destination,
        state=OperationState.FAILED,
        error_kind=ErrorKind.CANCELLED,
        error_message="cancelled before start",
        failed_in=OperationState.PENDING,
    )


def run_batch(
    kind: OperationKind,
    items: Iterable[WorkItem],
    password: SecretInput,
    workers: int = 1,
    overwrite: bool = False,
    remove_original: bool = False,
    fail_fast: bool = False,
    cancel_event: Optional[threading.Event] = None,
) -> BatchReport:
    """
    Encrypt or decrypt every item and collect one result per item.

    Results are returned in input order. A failure does not stop the batch
    unless ``fail_fast`` is set, in which case items that have not started
    yet are reported as cancelled. Setting ``cancel_event`` from another
    thread has the same effect.
    """
    if workers < 1:
        raise ValueError("workers must be >= 1")
    if remove_original and kind is not OperationKind.ENCRYPT:
        raise ValueError("remove_original only applies to encryption")

    items = list(items)
    stop = cancel_event or threading.Event()

    def run_one(item: WorkItem) -> OperationResult:
        if stop.is_set():
            return _cancelled(kind, item)
        if kind is OperationKind.ENCRYPT:
            result = encrypt_file(
                item.source,
                password,
                item.destination,
                overwrite=overwrite,
                remove_original=remove_original,
            )
        else:
            result = decrypt_file(item.source, password, item.destination, overwrite=overwrite)
        if fail_fast and not result.success:
            stop.set()
        return result

    logger.debug("running %d %s item(s) on %d worker(s)", len(items), kind.value, workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="protectpath") as executor:
        futures = [executor.submit(run_one, item) for item in items]
        report = BatchReport(results=[f.result() for f in futures])

    logger.info("%s batch: %s", kind.value, report.summary())
    return report
