"""Unit tests for utility functions."""

import pytest

from srcmirror.utils import format_megabytes, format_size, parse_bool


class TestFormatSize:
    """Tests for format_size function."""

    def test_bytes(self):
        """Test sizes below one kilobyte."""
        assert format_size(0) == "0 B"
        assert format_size(512) == "512 B"

    def test_larger_units(self):
        """Test kilobyte, megabyte and gigabyte sizes."""
        assert format_size(1536) == "1.5 KB"
        assert format_size(5 * 1024 * 1024) == "5.0 MB"
        assert format_size(2 * 1024 * 1024 * 1024) == "2.0 GB"


class TestFormatMegabytes:
    """Tests for format_megabytes function."""

    def test_two_decimals(self):
        """Test that the result always has two decimals."""
        assert format_megabytes(0) == "0.00"
        assert format_megabytes(1048576) == "1.00"
        assert format_megabytes(1572864) == "1.50"

    def test_rounding(self):
        """Test rounding of small sizes."""
        assert format_megabytes(5000) == "0.00"
        assert format_megabytes(10 * 1024) == "0.01"


class TestParseBool:
    """Tests for parse_bool function."""

    @pytest.mark.parametrize("value", [True, "true", "TRUE", "1", "yes", " on ", 1])
    def test_truthy(self, value):
        """Test values that enable a flag."""
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, None, "", "false", "0", "no", 0, []])
    def test_falsy(self, value):
        """Test values that leave a flag disabled."""
        assert parse_bool(value) is False
