"""Organization-name canonicalization.

Every comparison in the matcher and every graph node key goes through
:func:`normalize_name`, so it must stay total and idempotent.
"""

from __future__ import annotations

import re

from ownershiplens.entity_resolution.variants import DESCRIPTIVE_SUFFIXES

_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")

LEGAL_SUFFIXES: frozenset[str] = frozenset({
    "inc", "ltd", "llc", "corp", "corporation", "limited", "co", "company",
    "gmbh", "sa", "spa", "bv", "ag", "plc", "se",
})


def normalize_name(name: str | None) -> str:
    """Normalise an organization name for matching and graph keys.

    Steps:
      1. Lowercase.
      2. Remove punctuation (``.,/#!$%^&*;:{}=-_`~()``).
      3. Drop legal-entity suffix tokens (Ltd, Inc, GmbH, etc.) wherever
         they appear as whole tokens.
      4. Collapse whitespace and strip leading/trailing spaces.
    """
    if not name:
        return ""

    text = _PUNCTUATION.sub("", name.lower())
    return " ".join(token for token in text.split() if token not in LEGAL_SUFFIXES)


def extract_base_name(normalized: str) -> str:
    """Strip descriptive tokens ("device", "systems", "china", ...) from a normalized name.

    Returns an empty string when every token is descriptive.
    """
    return " ".join(
        token for token in normalized.split() if token not in DESCRIPTIVE_SUFFIXES
    )
