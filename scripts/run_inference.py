#!/usr/bin/env python3
"""CLI script to run ownership inference over a discovered-edge snapshot."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
import typer

from ownershiplens.config import get_settings
from ownershiplens.io import load_edges
from ownershiplens.ownership.pipeline import run_inference_pipeline
from ownershiplens.ownership.stats import format_statistics

logger = structlog.get_logger(__name__)
app = typer.Typer()


@app.command()
def main(
    edges_path: Path = typer.Argument(..., help="JSON file of ownership edges or records"),
    max_depth: int | None = typer.Option(
        None, "--max-depth", help="Cap on inferred chain length (edges)"
    ),
    merge_variants: bool = typer.Option(
        False, "--merge-variants", help="Fold fuzzy variant spellings into one node"
    ),
    universe_size: int | None = typer.Option(
        None, "--universe-size", help="Size of the screened list, for coverage percent"
    ),
    output: Path | None = typer.Option(None, "--output", help="Write full results as JSON"),
    sample: int = typer.Option(10, help="Number of sample relationships to print"),
) -> None:
    """Build the ownership graph and infer transitive and sibling relationships."""
    if max_depth is not None and max_depth < 1:
        raise typer.BadParameter("--max-depth must be a positive integer")

    settings = get_settings()
    try:
        edges = load_edges(edges_path)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    logger.info("edges_loaded", count=len(edges), path=str(edges_path))

    result = run_inference_pipeline(
        edges,
        settings=settings,
        max_depth=max_depth,
        merge_variants=merge_variants,
        universe_size=universe_size,
    )

    typer.echo(format_statistics(result.stats, result.coverage))
    typer.echo("")
    typer.echo(f"Transitive relationships: {len(result.transitive)}")
    typer.echo(f"Sibling relationships:    {len(result.siblings)}")

    for rel in result.transitive[:sample]:
        typer.echo(f"  {rel.entity} => {rel.related_entity}")
        typer.echo(f"     Chain: {' -> '.join(rel.inference_chain)} ({rel.confidence:.0%})")
    for rel in result.siblings[:sample]:
        typer.echo(f"  {rel.entity} <-> {rel.related_entity}")
        typer.echo(f"     Via: {rel.inference_chain[1]} ({rel.confidence:.0%})")

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        logger.info("inference_results_saved", path=str(output))


if __name__ == "__main__":
    app()
