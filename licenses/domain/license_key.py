"""
License key format.

Keys look like ``XXXX-XXXX-XXXX-XXXX`` or, with a prefix,
``PREFIX-XXXX-XXXX-XXXX``, drawn from upper-case letters and digits.
"""

import re
import secrets
import string
from typing import Optional

KEY_ALPHABET = string.ascii_uppercase + string.digits
SEGMENT_LENGTH = 4
MAX_PREFIX_LENGTH = 20

_PREFIX_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def _segment() -> str:
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(SEGMENT_LENGTH))


def validate_prefix(prefix: Optional[str]) -> Optional[str]:
    """
    Normalise a key prefix.

    Args:
        prefix: Optional prefix (e.g., 'DSEC')

    Returns:
        The stripped prefix, or None if blank

    Raises:
        ValueError: If the prefix contains separators or is too long
    """
    if prefix is None or not prefix.strip():
        return None
    prefix = prefix.strip()
    if len(prefix) > MAX_PREFIX_LENGTH:
        raise ValueError("Key prefix too long")
    if not _PREFIX_PATTERN.match(prefix):
        raise ValueError(f"Invalid key prefix: {prefix}")
    return prefix


def generate_license_key(prefix: Optional[str] = None) -> str:
    """
    Generate a license key.

    Args:
        prefix: Optional prefix replacing the first segment

    Returns:
        Generated license key string
    """
    prefix = validate_prefix(prefix)
    if prefix:
        return f"{prefix}-{_segment()}-{_segment()}-{_segment()}"
    return f"{_segment()}-{_segment()}-{_segment()}-{_segment()}"
