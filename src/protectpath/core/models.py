"""
Data models for per-file operations and their outcomes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any

from .exceptions import (
    ProtectPathError,
    FormatError,
    DerivationError,
    AuthenticationError,
    FileAccessError,
    OverwriteConflictError,
)


class OperationKind(Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class OperationState(Enum):
    # Lifecycle of one file operation; COMPLETED and FAILED are terminal
    PENDING = "pending"
    VALIDATING = "validating"
    DERIVING = "deriving"
    TRANSFORMING = "transforming"
    WRITING = "writing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (OperationState.COMPLETED, OperationState.FAILED)


class ErrorKind(Enum):
    # Classification attached to a failed OperationResult
    FORMAT = "format"
    DERIVATION = "derivation"
    AUTHENTICATION = "authentication"
    IO = "io"
    OVERWRITE_CONFLICT = "overwrite_conflict"
    CANCELLED = "cancelled"

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorKind":
        """Map an exception raised during an operation onto its kind."""
        # subclasses before their parents
        if isinstance(exc, OverwriteConflictError):
            return cls.OVERWRITE_CONFLICT
        if isinstance(exc, FormatError):
            return cls.FORMAT
        if isinstance(exc, AuthenticationError):
            return cls.AUTHENTICATION
        if isinstance(exc, DerivationError):
            return cls.DERIVATION
        if isinstance(exc, (FileAccessError, OSError)):
            return cls.IO
        if isinstance(exc, ProtectPathError):
            return cls.IO
        raise TypeError(f"Unclassified exception: {type(exc).__name__}")


@dataclass
class OperationResult:
    """Outcome of one encrypt or decrypt invocation."""

    operation: OperationKind
    source: Path
    destination: Path
    success: bool = False
    state: OperationState = OperationState.PENDING
    bytes_read: int = 0
    bytes_written: int = 0
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    failed_in: Optional[OperationState] = None
    elapsed: float = 0.0
    source_removed: bool = False

    @property
    def failed(self) -> bool:
        return self.state is OperationState.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """
            Convert result to a JSON friendly dict
        """
        return {
            "operation": self.operation.value,
            "source": str(self.source),
            "destination": str(self.destination),
            "success": self.success,
            "state": self.state.value,
            "bytes_read": self.bytes_read,
            "bytes_written": self.bytes_written,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error_message": self.error_message,
            "failed_in": self.failed_in.value if self.failed_in else None,
            "elapsed": round(self.elapsed, 4),
            "source_removed": self.source_removed,
        }

    def __repr__(self) -> str:
        status = "ok" if self.success else f"failed:{self.error_kind.value if self.error_kind else '?'}"
        return f"OperationResult({self.operation.value} {str(self.source)!r} -> {str(self.destination)!r}, {status})"
