"""
Sanitization helpers for user-provided text that ends up in logs.
"""
import re

_CONTROL_CHARS_RE = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_for_logging(value: str, max_length: int = 200) -> str:
    """
    Sanitize value for safe logging (prevents log injection).

    Args:
        value: Value to sanitize, typically a field name or filter value
        max_length: Maximum length

    Returns:
        Sanitized value safe for logging
    """
    if not value:
        return ""

    # Newlines become spaces
    value = re.sub(r'[\r\n]', ' ', value)
    value = _CONTROL_CHARS_RE.sub('', value)

    if len(value) > max_length:
        value = value[:max_length] + "..."

    return value
