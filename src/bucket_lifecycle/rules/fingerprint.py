"""Content-derived identifiers for rules that arrive without an ID."""

from __future__ import annotations

import hashlib


def fingerprint(content: str) -> str:
    """Return the hex MD5 digest of ``content``.

    Args:
        content: Any string, typically a rule in text form.

    Returns:
        A 32 character lowercase hex string.
    """

    return hashlib.md5(content.encode("utf-8")).hexdigest()
