"""Unit tests for single-file encrypt/decrypt operations."""

import os
from pathlib import Path

import pytest

from conftest import INTEGRATION_PASSWORD, WRONG_PASSWORD, BrokenRandom, container_rejecting
from protectpath.core import file_ops
from protectpath.core.file_ops import (
    decrypt_file,
    default_decrypt_destination,
    default_encrypt_destination,
    encrypt_file,
)
from protectpath.core.models import ErrorKind, OperationKind, OperationState
from protectpath.security.container import expected_container_size


@pytest.fixture
def plain_file(tmp_path: Path) -> Path:
    p = tmp_path / "notes.txt"
    p.write_bytes(b"meeting at noon\n" * 10)
    return p


def test_default_destinations():
    assert default_encrypt_destination("a/b.txt") == Path("a/b.txt.enc")
    assert default_decrypt_destination("a/b.txt.enc") == Path("a/b.txt")
    assert default_decrypt_destination("a/b.ENC") == Path("a/b")
    assert default_decrypt_destination("a/b.bin") == Path("a/b.bin.dec")
    assert default_decrypt_destination("a/.enc") == Path("a/.enc.dec")


def test_encrypt_then_decrypt_file(plain_file: Path, tmp_path: Path) -> None:
    enc = encrypt_file(plain_file, "pw")
    assert enc.success
    assert enc.operation is OperationKind.ENCRYPT
    assert enc.state is OperationState.COMPLETED
    assert enc.destination == tmp_path / "notes.txt.enc"
    assert enc.bytes_read == 160
    assert enc.bytes_written == expected_container_size(160)
    assert enc.destination.stat().st_size == enc.bytes_written
    assert plain_file.exists()

    out = tmp_path / "roundtrip.txt"
    dec = decrypt_file(enc.destination, "pw", out)
    assert dec.success
    assert dec.operation is OperationKind.DECRYPT
    assert out.read_bytes() == plain_file.read_bytes()
    assert dec.bytes_written == 160


def test_empty_file_roundtrip(tmp_path: Path) -> None:
    src = tmp_path / "empty"
    src.write_bytes(b"")
    enc = encrypt_file(src, "pw")
    assert enc.success
    assert enc.destination.stat().st_size == 64
    dec = decrypt_file(enc.destination, "pw", tmp_path / "empty.out")
    assert dec.success
    assert (tmp_path / "empty.out").read_bytes() == b""


def test_binary_file_fidelity(tmp_path: Path) -> None:
    src = tmp_path / "bytes.bin"
    src.write_bytes(bytes(range(256)))
    enc = encrypt_file(src, "pw")
    src.unlink()
    dec = decrypt_file(enc.destination, "pw")
    assert dec.success
    assert dec.destination == src
    assert src.read_bytes() == bytes(range(256))


def test_wrong_password_writes_nothing(tmp_path: Path) -> None:
    enc_path = tmp_path / "secret.txt.enc"
    enc_path.write_bytes(container_rejecting(b"classified", INTEGRATION_PASSWORD, WRONG_PASSWORD))

    result = decrypt_file(enc_path, WRONG_PASSWORD)
    assert not result.success
    assert result.state is OperationState.FAILED
    assert result.error_kind is ErrorKind.AUTHENTICATION
    assert result.failed_in is OperationState.TRANSFORMING
    assert "wrong password" in result.error_message
    assert not (tmp_path / "secret.txt").exists()
    assert [p.name for p in tmp_path.iterdir()] == ["secret.txt.enc"]


def test_short_container_is_format_failure(tmp_path: Path) -> None:
    bad = tmp_path / "short.enc"
    bad.write_bytes(os.urandom(63))
    result = decrypt_file(bad, "pw")
    assert result.error_kind is ErrorKind.FORMAT
    assert result.failed_in is OperationState.VALIDATING
    assert not (tmp_path / "short").exists()


def test_encrypt_refuses_existing_destination(plain_file: Path, tmp_path: Path) -> None:
    dest = tmp_path / "notes.txt.enc"
    dest.write_bytes(b"keep me")
    result = encrypt_file(plain_file, "pw")
    assert result.error_kind is ErrorKind.OVERWRITE_CONFLICT
    assert result.failed_in is OperationState.VALIDATING
    assert result.bytes_read == 0
    assert dest.read_bytes() == b"keep me"


def test_encrypt_overwrite_replaces(plain_file: Path, tmp_path: Path) -> None:
    dest = tmp_path / "notes.txt.enc"
    dest.write_bytes(b"old")
    result = encrypt_file(plain_file, "pw", overwrite=True)
    assert result.success
    assert dest.stat().st_size == expected_container_size(160)


def test_decrypt_refuses_existing_destination(plain_file: Path, tmp_path: Path) -> None:
    enc = encrypt_file(plain_file, "pw")
    result = decrypt_file(enc.destination, "pw")  # default target is notes.txt
    assert result.error_kind is ErrorKind.OVERWRITE_CONFLICT
    ok = decrypt_file(enc.destination, "pw", overwrite=True)
    assert ok.success


def test_remove_original(plain_file: Path) -> None:
    result = encrypt_file(plain_file, "pw", remove_original=True)
    assert result.success
    assert result.source_removed
    assert not plain_file.exists()
    assert result.destination.exists()


def test_remove_original_skipped_for_in_place(plain_file: Path) -> None:
    original = plain_file.read_bytes()
    result = encrypt_file(plain_file, "pw", plain_file, overwrite=True, remove_original=True)
    assert result.success
    assert not result.source_removed
    assert plain_file.exists()
    assert decrypt_file(plain_file, "pw", plain_file, overwrite=True).success
    assert plain_file.read_bytes() == original


def test_remove_original_not_attempted_on_failure(plain_file: Path, tmp_path: Path) -> None:
    (tmp_path / "notes.txt.enc").write_bytes(b"x")
    result = encrypt_file(plain_file, "pw", remove_original=True)
    assert not result.success
    assert plain_file.exists()


def test_missing_source_is_io_failure(tmp_path: Path) -> None:
    result = encrypt_file(tmp_path / "ghost.txt", "pw")
    assert result.error_kind is ErrorKind.IO
    assert result.failed_in is OperationState.VALIDATING
    assert not (tmp_path / "ghost.txt.enc").exists()


def test_broken_rng_writes_nothing(plain_file: Path, tmp_path: Path) -> None:
    result = encrypt_file(plain_file, "pw", rng=BrokenRandom())
    assert result.error_kind is ErrorKind.DERIVATION
    assert not (tmp_path / "notes.txt.enc").exists()


def test_empty_password_is_derivation_failure(plain_file: Path) -> None:
    result = encrypt_file(plain_file, "")
    assert result.error_kind is ErrorKind.DERIVATION
    assert result.failed_in is OperationState.DERIVING


def test_write_failure_is_io(plain_file: Path, tmp_path: Path) -> None:
    result = encrypt_file(plain_file, "pw", tmp_path / "missing-dir" / "out.enc")
    assert result.error_kind is ErrorKind.IO
    assert result.failed_in is OperationState.WRITING


def test_state_transitions_logged(plain_file: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("DEBUG", logger="protectpath.core.file_ops")
    encrypt_file(plain_file, "super-secret-pw")
    text = caplog.text
    for state in ("validating", "deriving", "transforming", "writing", "completed"):
        assert state in text
    assert "super-secret-pw" not in text


def test_failure_logged_as_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("WARNING", logger="protectpath.core.file_ops")
    decrypt_file(tmp_path / "missing.enc", "pw")
    assert any(r.levelname == "WARNING" for r in caplog.records)


def test_unexpected_errors_propagate(plain_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(*args, **kwargs):
        raise KeyError("bug")

    monkeypatch.setattr(file_ops, "encrypt_bytes", boom)
    with pytest.raises(KeyError):
        encrypt_file(plain_file, "pw")
