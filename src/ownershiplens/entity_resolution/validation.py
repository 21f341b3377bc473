"""Precision / recall measurement for name-matching quality.

Each labelled pair is run through the matcher and classified as a true
positive, false positive, false negative or true negative; the counts
feed the usual retrieval metrics.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from ownershiplens.entity_resolution.matcher import NameMatcher

# (minimum F1, label, advice), checked in order
_ASSESSMENT_BANDS: tuple[tuple[float, str, str], ...] = (
    (0.95, "EXCELLENT", "thresholds suitable for unattended screening"),
    (0.85, "GOOD", "screen with analyst review of non-exact hits"),
    (0.70, "FAIR", "tune fuzzy / pattern thresholds before relying on it"),
    (0.0, "POOR", "matcher misses or over-matches too many pairs"),
)


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _outcome(matched: bool, expected: bool) -> str:
    if matched:
        return "true_positives" if expected else "false_positives"
    return "false_negatives" if expected else "true_negatives"


def compute_match_metrics(
    ground_truth: Iterable[Mapping[str, Any]],
    matcher: NameMatcher | None = None,
) -> dict[str, float]:
    """Compute precision, recall, and F1 for the name matcher.

    Parameters
    ----------
    ground_truth:
        Labelled pairs, each with ``name_a``, ``name_b`` and a boolean
        ``same_entity``.
    matcher:
        Matcher under test; defaults to one built from settings.

    Returns
    -------
    dict
        ``precision``, ``recall``, ``f1``, the four outcome counts and
        ``total_pairs``, plus a ``matched_<strategy>`` count for each
        strategy that accepted at least one pair.
    """
    if matcher is None:
        matcher = NameMatcher.from_settings()

    outcomes: Counter[str] = Counter()
    strategies: Counter[str] = Counter()
    total = 0

    for pair in ground_truth:
        total += 1
        result = matcher.match(pair["name_a"], pair["name_b"])
        outcomes[_outcome(result.matched, bool(pair["same_entity"]))] += 1
        if result.matched:
            strategies[f"matched_{result.match_type.value}"] += 1

    tp = outcomes["true_positives"]
    precision = _ratio(tp, tp + outcomes["false_positives"])
    recall = _ratio(tp, tp + outcomes["false_negatives"])
    f1 = _ratio(2 * precision * recall, precision + recall)

    metrics: dict[str, float] = {"precision": precision, "recall": recall, "f1": f1}
    for name in ("true_positives", "false_positives", "false_negatives", "true_negatives"):
        metrics[name] = outcomes[name]
    metrics["total_pairs"] = total
    metrics.update(sorted(strategies.items()))
    return metrics


def generate_validation_report(metrics: Mapping[str, float]) -> str:
    """Render metrics from :func:`compute_match_metrics` as a text report."""
    counts = [
        ("Total pairs evaluated", "total_pairs"),
        ("True positives", "true_positives"),
        ("False positives", "false_positives"),
        ("False negatives", "false_negatives"),
    ]
    lines = ["Name Matching Validation Report", "=" * 40, ""]
    lines += [f"{label + ':':<24}{metrics.get(key, 0):.0f}" for label, key in counts]
    lines += [
        "",
        f"Precision:  {metrics.get('precision', 0.0):.4f}",
        f"Recall:     {metrics.get('recall', 0.0):.4f}",
        f"F1 Score:   {metrics.get('f1', 0.0):.4f}",
    ]

    by_strategy = {
        key.removeprefix("matched_"): value
        for key, value in metrics.items()
        if key.startswith("matched_")
    }
    if by_strategy:
        lines += ["", "Matches by strategy:"]
        lines += [f"  {name:<16} {count:.0f}" for name, count in by_strategy.items()]

    f1 = metrics.get("f1", 0.0)
    label, advice = next(
        (label, advice) for floor, label, advice in _ASSESSMENT_BANDS if f1 >= floor
    )
    lines += ["", f"Assessment: {label} ({advice})"]
    return "\n".join(lines)
