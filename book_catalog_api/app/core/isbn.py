"""
ISBN canonicalization.

All spellings of the same ISBN (with or without dashes, lower or upper
case check character) are reduced to a single dashed form before they
are stored or used as a lookup key.
"""

from __future__ import annotations

import re
from typing import Optional

ISBN10_CANONICAL_RE = re.compile(r"^\d-\d{3}-\d{5}-[\dX]$")
ISBN13_CANONICAL_RE = re.compile(r"^97[89]-\d-\d{4}-\d{4}-\d$")


def normalize_isbn(raw: Optional[str]) -> Optional[str]:
    """Return the canonical dashed form of ``raw``.

    Dashes are stripped and the remainder upper-cased.  Ten characters
    are regrouped as ``D-DDD-DDDDD-D``, thirteen as ``DDD-D-DDDD-DDDD-D``.
    Any other length is returned dash-stripped and otherwise unchanged;
    shape checking is left to :func:`is_canonical_isbn`.
    """
    if raw is None:
        return None
    isbn = raw.replace("-", "").upper()
    if len(isbn) == 10:
        return f"{isbn[0]}-{isbn[1:4]}-{isbn[4:9]}-{isbn[9]}"
    if len(isbn) == 13:
        return f"{isbn[:3]}-{isbn[3]}-{isbn[4:8]}-{isbn[8:12]}-{isbn[12]}"
    return isbn


def is_canonical_isbn(value: Optional[str]) -> bool:
    """True when ``value`` is a well-formed canonical ISBN-10 or ISBN-13."""
    if not value:
        return False
    return bool(ISBN10_CANONICAL_RE.match(value) or ISBN13_CANONICAL_RE.match(value))
