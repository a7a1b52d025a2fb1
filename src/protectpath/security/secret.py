"""Scoped holders for passwords and derived keys.

A ``SecretBuffer`` owns a ``bytearray`` and overwrites it with zeros when the
``with`` block ends, including on exceptions. This is best effort: Python
may keep other copies (for example the original ``str`` password), but the
buffers the engine controls do not outlive the operation.
"""
from __future__ import annotations

from typing import Union

SecretInput = Union[str, bytes, bytearray, memoryview]


def wipe(buf: bytearray) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    for i in range(len(buf)):
        buf[i] = 0


class SecretBuffer:
    __slots__ = ("_buf", "_wiped")

    def __init__(self, data: bytes | bytearray | memoryview):
        self._buf = bytearray(data)
        self._wiped = False

    @classmethod
    def from_password(cls, password: SecretInput) -> "SecretBuffer":
        """Encode a password as UTF-8 into a new buffer."""
        if isinstance(password, str):
            return cls(password.encode("utf-8"))
        if isinstance(password, (bytes, bytearray, memoryview)):
            return cls(password)
        raise TypeError("password must be str or bytes-like")

    @property
    def value(self) -> bytearray:
        if self._wiped:
            raise ValueError("secret has been wiped")
        return self._buf

    @property
    def wiped(self) -> bool:
        return self._wiped

    def __len__(self) -> int:
        return len(self._buf)

    def wipe(self) -> None:
        if not self._wiped:
            wipe(self._buf)
            self._wiped = True

    def __enter__(self) -> "SecretBuffer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        # never show the contents
        if self._wiped:
            return "SecretBuffer(WIPED)"
        return f"SecretBuffer(len={len(self._buf)})"
