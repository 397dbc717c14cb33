"""Tests for checksum calculation and verification helpers."""

import hashlib
import io

import pytest

from common.exceptions import NotFoundError
from storage.checksum_validator import (
    IncrementalChecksumCalculator,
    compute_checksum,
    compute_file_checksum,
    compute_stream_checksum,
    verify_checksum,
    verify_file_checksum,
)

ABC_SHA256 = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_compute_checksum_known_value():
    assert compute_checksum(b"abc") == ABC_SHA256


def test_compute_checksum_is_fixed_length_lowercase_hex():
    checksum = compute_checksum(b"")
    assert len(checksum) == 64
    assert checksum == checksum.lower()
    int(checksum, 16)


def test_stream_checksum_matches_whole_buffer():
    data = bytes(range(256)) * 1000
    stream = io.BytesIO(data)

    assert compute_stream_checksum(stream, piece_size=1000) == compute_checksum(data)


def test_stream_checksum_of_empty_stream():
    assert compute_stream_checksum(io.BytesIO(b"")) == hashlib.sha256(b"").hexdigest()


def test_verify_checksum_is_case_insensitive():
    assert verify_checksum(b"abc", ABC_SHA256.upper())
    assert verify_checksum(b"abc", ABC_SHA256)


def test_verify_checksum_mismatch_returns_false():
    assert verify_checksum(b"abd", ABC_SHA256) is False
    assert verify_checksum(b"abc", None) is False
    assert verify_checksum(b"abc", "") is False


def test_file_checksum(tmp_path):
    path = tmp_path / "data.bin"
    data = b"x" * 200_000
    path.write_bytes(data)

    assert compute_file_checksum(path) == hashlib.sha256(data).hexdigest()
    assert verify_file_checksum(path, hashlib.sha256(data).hexdigest().upper())


def test_file_checksum_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        compute_file_checksum(tmp_path / "missing.bin")

    assert verify_file_checksum(tmp_path / "missing.bin", ABC_SHA256) is False


class TestIncrementalChecksumCalculator:
    def test_incremental_equals_one_shot(self):
        calculator = IncrementalChecksumCalculator()
        calculator.update(b"a")
        calculator.update(b"bc")

        assert calculator.bytes_seen == 3
        assert calculator.finalize() == ABC_SHA256

    def test_update_after_finalize_raises(self):
        calculator = IncrementalChecksumCalculator()
        calculator.finalize()

        with pytest.raises(ValueError):
            calculator.update(b"more")
