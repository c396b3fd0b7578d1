"""
Tests for transfer outcome classification and byte formatting.
"""

import pytest

from drive_handoff.core.domain.models import format_bytes
from drive_handoff.core.services.transfer_policy import (
    disconnect_counts_as_success, is_success_status, progress_percent
)


class TestTransferPolicy:
    """Test cases for the transfer classification rules."""

    @pytest.mark.parametrize("status", [200, 201, 204, 308, 399])
    def test_success_statuses(self, status: int) -> None:
        assert is_success_status(status)

    @pytest.mark.parametrize("status", [0, 100, 199, 400, 403, 404, 500, 503])
    def test_failure_statuses(self, status: int) -> None:
        assert not is_success_status(status)

    @pytest.mark.parametrize("loaded,total,expected", [
        (0, 100, 0),
        (1, 3, 33),
        (2, 3, 67),
        (10, 10, 100),
        (12, 10, 100),
        (5, 0, 0),
    ])
    def test_progress_percent(self, loaded: int, total: int, expected: int) -> None:
        assert progress_percent(loaded, total) == expected

    @pytest.mark.parametrize("bytes_sent,total,expected", [
        (10000, 10000, True),
        (10001, 10000, True),
        (9990, 10000, False),
        (9999, 10000, False),
        (0, 10000, False),
        (0, 0, False),
    ])
    def test_disconnect_needs_every_byte(self, bytes_sent: int, total: int, expected: bool) -> None:
        assert disconnect_counts_as_success(bytes_sent, total) is expected


class TestFormatBytes:
    """Human-readable sizes."""

    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512.0 B"),
        (1024, "1.0 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024 ** 3, "3.0 GB"),
    ])
    def test_format_bytes(self, size: int, expected: str) -> None:
        assert format_bytes(size) == expected
