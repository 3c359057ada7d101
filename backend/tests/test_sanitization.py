"""
Tests for log sanitization.
"""
import pytest
from chartchat.core.sanitization import sanitize_for_logging


@pytest.mark.unit
def test_sanitize_for_logging():
    """Test logging sanitization."""
    # Newlines replaced
    assert "\n" not in sanitize_for_logging("Sale\nPrice")
    assert sanitize_for_logging("Sale\r\nPrice") == "Sale  Price"

    # Control characters removed
    assert sanitize_for_logging("MPG\x00\x1b") == "MPG"

    # Length limit
    assert sanitize_for_logging("a" * 300) == "a" * 200 + "..."
    assert sanitize_for_logging("a" * 30, max_length=10) == "a" * 10 + "..."


@pytest.mark.unit
def test_sanitize_empty_values():
    assert sanitize_for_logging("") == ""
    assert sanitize_for_logging(None) == ""
