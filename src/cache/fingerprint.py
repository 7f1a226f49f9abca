# src/cache/fingerprint.py — v3
"""Document-set fingerprinting for cache change detection.

The fingerprint only detects that the reference document set changed;
it is not a security primitive.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable

# Object names never contain this character in the stores we read from.
SEPARATOR = "|"


def compute_fingerprint(document_ids: Iterable[str]) -> str:
    """Hash a set of document identifiers independently of their order.

    Args:
        document_ids: Document identifiers (object names). Duplicates are
            collapsed.

    Returns:
        MD5 hex digest of the sorted, pipe-joined identifiers.
    """
    joined = SEPARATOR.join(sorted(set(document_ids)))
    return hashlib.md5(joined.encode("utf-8")).hexdigest()  # noqa: S324
