#!/usr/bin/env python3
"""CLI script to screen a partner name against a restricted-entity list."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
import typer

from ownershiplens.config import get_settings
from ownershiplens.entity_resolution.matcher import NameMatcher
from ownershiplens.io import load_edges, load_names
from ownershiplens.ownership.graph import build_graph
from ownershiplens.screening import screen_name

logger = structlog.get_logger(__name__)
app = typer.Typer()


@app.command()
def main(
    name: str = typer.Argument(..., help="Partner name to screen"),
    edges_path: Path = typer.Option(..., "--edges", help="JSON file of ownership edges"),
    restricted_path: Path = typer.Option(
        ..., "--restricted", help="Restricted-entity list, one name per line"
    ),
    max_depth: int | None = typer.Option(None, "--max-depth", help="Cap on chain length"),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON"),
) -> None:
    """Resolve NAME through the ownership graph and report restricted links."""
    if not name.strip():
        raise typer.BadParameter("NAME must not be empty")

    settings = get_settings()
    try:
        graph = build_graph(load_edges(edges_path))
        restricted = load_names(restricted_path)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    logger.info("restricted_list_loaded", count=len(restricted))

    report = screen_name(
        name,
        graph,
        restricted,
        matcher=NameMatcher.from_settings(settings),
        max_depth=max_depth,
    )

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return

    typer.echo(report.summary())
    for hit in report.hits:
        chain = " -> ".join(hit.finding.inference_chain)
        typer.echo(f"  [{hit.tier}] {hit.finding.name}: {chain}")


if __name__ == "__main__":
    app()
