"""Snapshot loading for the operator scripts.

The library itself works on in-memory edges; these helpers only read the
JSON exports produced by the discovered-ownership store.
"""

from __future__ import annotations

import json
from pathlib import Path

from ownershiplens.ownership.models import OwnershipEdge, edges_from_records


def load_edges(path: Path) -> list[OwnershipEdge]:
    """Load edges from a JSON list of edge dicts or discovered-ownership records.

    Records are recognised by an ``entity_name`` key on the first entry;
    anything else is read as :meth:`OwnershipEdge.to_dict` output.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"cannot read edges from {path}: {exc}"
        raise ValueError(msg) from exc

    if not isinstance(data, list):
        msg = f"{path} must contain a JSON list"
        raise ValueError(msg)

    records = [r for r in data if isinstance(r, dict)]
    if records and "entity_name" in records[0]:
        return edges_from_records(records)
    return [OwnershipEdge.from_dict(r) for r in records]


def load_names(path: Path) -> list[str]:
    """Load one name per line, ignoring blanks and ``#`` comments."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        msg = f"cannot read names from {path}: {exc}"
        raise ValueError(msg) from exc
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]
