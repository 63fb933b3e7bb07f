"""Unit tests for the formatting helpers.

Example Run:
    pytest tests/unit/hostbridge/utils/test_formatting.py -v
"""

import pytest

from hostbridge.utils.formatting import sanitize_id, truncate


class TestSanitizeId:
    """Test suite for sanitize_id."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("My PC Name", "my_pc_name"),
            ("Test/Device", "test_device"),
            ("CPU #1 Temp", "cpu_1_temp"),
            ("a++b", "a_b"),
            ("/leading and trailing/", "leading_and_trailing"),
        ],
    )
    def test_sanitize(self, name, expected):
        """Test that MQTT special characters never reach an id."""
        assert sanitize_id(name) == expected


class TestTruncate:
    """Test suite for truncate."""

    def test_short_text_unchanged(self):
        """Test that text within the limit is returned as is."""
        assert truncate("notes", 255) == "notes"

    def test_long_text_cut(self):
        """Test that long text is cut to the limit with an ellipsis."""
        result = truncate("x" * 300, 255)

        assert len(result) == 255
        assert result.endswith("...")
