"""Syntactic validation helpers."""

from __future__ import annotations

import re

# Sanity check only: deliverability, internationalised domains and the full
# RFC grammar are out of scope.
EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}")


def is_valid_email(candidate: object) -> bool:
    """Return True if the whole of ``candidate`` looks like an email address.

    Usage::

        is_valid_email("user@domain.com")  # True
        is_valid_email("user@domain")  # False
    """

    if not isinstance(candidate, str):
        return False
    return EMAIL_PATTERN.fullmatch(candidate) is not None
