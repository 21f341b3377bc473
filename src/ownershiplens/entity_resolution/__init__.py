"""Name normalisation and multi-strategy organization-name matching."""

from __future__ import annotations

from ownershiplens.entity_resolution.matcher import (
    MatchResult,
    MatchType,
    NameMatcher,
    levenshtein_similarity,
    pattern_score,
    transliteration_entry,
)
from ownershiplens.entity_resolution.normalizer import extract_base_name, normalize_name
from ownershiplens.entity_resolution.validation import (
    compute_match_metrics,
    generate_validation_report,
)

__all__ = [
    "MatchResult",
    "MatchType",
    "NameMatcher",
    "compute_match_metrics",
    "extract_base_name",
    "generate_validation_report",
    "levenshtein_similarity",
    "normalize_name",
    "pattern_score",
    "transliteration_entry",
]
