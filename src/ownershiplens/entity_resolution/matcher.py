"""Multi-strategy organization-name matching.

Strategies run in strict priority order and the first one that accepts
wins: exact, fuzzy (normalized Levenshtein), transliteration table,
pattern heuristics.  A miss still reports the best score seen so callers
can inspect near misses.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum

import jellyfish
import structlog
from unidecode import unidecode

from ownershiplens.config import Settings, get_settings
from ownershiplens.entity_resolution.normalizer import extract_base_name, normalize_name
from ownershiplens.entity_resolution.variants import TRANSLITERATION_VARIANTS

logger = structlog.get_logger(__name__)


class MatchType(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    TRANSLITERATION = "transliteration"
    PATTERN = "pattern"

    @property
    def priority(self) -> int:
        """Lower is stronger evidence."""
        return _PRIORITY[self]


_PRIORITY: dict[MatchType, int] = {
    MatchType.EXACT: 0,
    MatchType.FUZZY: 1,
    MatchType.TRANSLITERATION: 2,
    MatchType.PATTERN: 3,
}


@dataclass(frozen=True)
class MatchResult:
    """Outcome of comparing two organization names."""

    matched: bool
    similarity: float
    match_type: MatchType | None = None
    confidence: float = 0.0
    evidence: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "matched": self.matched,
            "similarity": self.similarity,
            "match_type": self.match_type.value if self.match_type else None,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
        }


# ---------------------------------------------------------------------------
# Scoring primitives
# ---------------------------------------------------------------------------

def levenshtein_similarity(a: str, b: str) -> float:
    """Return ``1 - distance / max(len)``; two empty strings score 1.0."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - jellyfish.levenshtein_distance(a, b) / longest


def _forms(raw: str, normalized: str) -> tuple[str, ...]:
    """Forms of a name searched for transliteration keys.

    The romanized form lets "华为" hit the "hua wei" variant.
    """
    romanized = normalize_name(unidecode(raw))
    if romanized and romanized != normalized:
        return (normalized, romanized)
    return (normalized,)


def transliteration_entry(raw: str, normalized: str | None = None) -> set[str]:
    """Return the transliteration table keys whose key or variant occurs in *raw*."""
    if normalized is None:
        normalized = normalize_name(raw)
    forms = _forms(raw, normalized)
    hits: set[str] = set()
    for key, variants in TRANSLITERATION_VARIANTS.items():
        needles = (key, *variants)
        if any(needle in form for form in forms for needle in needles):
            hits.add(key)
    return hits


def pattern_score(norm1: str, norm2: str) -> float:
    """Score structural similarity between two normalized names.

    - equal non-empty base names: 0.85
    - one name contains the other: 0.80
    - 2+ shared tokens longer than 3 chars: 0.75
    - exactly one shared token: 0.60
    """
    base1 = extract_base_name(norm1)
    base2 = extract_base_name(norm2)
    if base1 and base2 and base1 == base2:
        return 0.85

    if norm1 and norm2 and (norm1 in norm2 or norm2 in norm1):
        return 0.8

    tokens2 = {t for t in norm2.split() if len(t) > 3}
    common = {t for t in norm1.split() if len(t) > 3 and t in tokens2}
    if len(common) >= 2:
        return 0.75
    if len(common) == 1:
        return 0.6
    return 0.0


# ---------------------------------------------------------------------------
# Matcher
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NameMatcher:
    """Stateless name matcher; holds acceptance thresholds only."""

    fuzzy_threshold: float = 0.85
    pattern_threshold: float = 0.75
    transliteration_confidence: float = 0.9
    pattern_confidence_factor: float = 0.9
    parallel_threshold: int = 500
    max_workers: int = 4

    def __post_init__(self) -> None:
        for name in (
            "fuzzy_threshold",
            "pattern_threshold",
            "transliteration_confidence",
            "pattern_confidence_factor",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                msg = f"{name} must be within [0, 1], got {value!r}"
                raise ValueError(msg)
        if self.max_workers < 1:
            msg = f"max_workers must be positive, got {self.max_workers!r}"
            raise ValueError(msg)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> NameMatcher:
        if settings is None:
            settings = get_settings()
        return cls(
            fuzzy_threshold=settings.fuzzy_match_threshold,
            pattern_threshold=settings.pattern_match_threshold,
            transliteration_confidence=settings.transliteration_confidence,
            pattern_confidence_factor=settings.pattern_confidence_factor,
            parallel_threshold=settings.parallel_match_threshold,
            max_workers=settings.max_workers,
        )

    def match(self, name1: str, name2: str) -> MatchResult:
        """Compare two names; the first accepting strategy short-circuits."""
        norm1 = normalize_name(name1)
        norm2 = normalize_name(name2)

        # 1. Exact
        if norm1 == norm2:
            return MatchResult(
                matched=True,
                similarity=1.0,
                match_type=MatchType.EXACT,
                confidence=1.0,
                evidence=("Exact match on normalized name",),
            )

        # 2. Fuzzy
        fuzzy = levenshtein_similarity(norm1, norm2)
        if fuzzy > self.fuzzy_threshold:
            return MatchResult(
                matched=True,
                similarity=fuzzy,
                match_type=MatchType.FUZZY,
                confidence=fuzzy,
                evidence=(f"High fuzzy match similarity: {fuzzy * 100:.1f}%",),
            )

        # 3. Transliteration
        shared = transliteration_entry(name1 or "", norm1) & transliteration_entry(
            name2 or "", norm2
        )
        if shared:
            score = self.transliteration_confidence
            return MatchResult(
                matched=True,
                similarity=score,
                match_type=MatchType.TRANSLITERATION,
                confidence=score,
                evidence=tuple(
                    f"Transliteration variant of '{key}'" for key in sorted(shared)
                ),
            )

        # 4. Pattern
        pattern = pattern_score(norm1, norm2)
        if pattern > self.pattern_threshold:
            return MatchResult(
                matched=True,
                similarity=pattern,
                match_type=MatchType.PATTERN,
                confidence=pattern * self.pattern_confidence_factor,
                evidence=("Pattern-based match (likely related entity)",),
            )

        return MatchResult(matched=False, similarity=max(fuzzy, pattern))

    def batch_match(
        self,
        target: str,
        candidates: Sequence[str],
    ) -> list[tuple[str, MatchResult]]:
        """Match *target* against every candidate and keep the hits.

        Returns
        -------
        list[tuple[str, MatchResult]]
            Matched candidates sorted by similarity (descending), then by
            strategy priority, then by original input order.
        """
        if len(candidates) >= self.parallel_threshold and self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(lambda c: self.match(target, c), candidates))
        else:
            results = [self.match(target, c) for c in candidates]

        hits = [
            (candidate, result)
            for candidate, result in zip(candidates, results)
            if result.matched
        ]
        # sort() is stable, so equal keys keep input order
        hits.sort(key=lambda item: (-item[1].similarity, item[1].match_type.priority))

        logger.debug(
            "batch_match_complete",
            target=target,
            candidates=len(candidates),
            matched=len(hits),
        )
        return hits
