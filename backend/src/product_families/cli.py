"""Click CLI entry point.

Usage:
    product-families normalize --catalog data/catalog.json --attributes data/attributes.json
    product-families group --catalog data/catalog.json --output data/grouped.json
    product-families fetch-attributes --input data/products.json --concurrency 10
    product-families verify --snapshot data/product-families.json
    product-families colors --output data/colors.json
    product-families index
    product-families search "grab rail" --brand Mizu
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

import click

from product_families.catalog import CatalogError
from product_families.config import settings
from product_families.utils.logging import GREEN, RED, YELLOW, BOLD, DIM, RESET, get_logger

log = get_logger()


@click.group()
def cli() -> None:
    """Catalog normalization and product family pipeline CLI."""
    pass


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}")
    raise SystemExit(1)


@cli.command()
@click.option("--catalog", "catalog_path", default=None, help="Brand catalog JSON (default: settings.catalog_path)")
@click.option("--attributes", "attributes_path", default=None, help="Per-product attributes JSON (optional)")
@click.option("--output", "output_path", default=None, help="Snapshot output path")
def normalize(catalog_path: str | None, attributes_path: str | None, output_path: str | None) -> None:
    """Build the product family snapshot from a catalog."""
    from product_families.pipeline import run_pipeline

    if attributes_path is None and Path(settings.attributes_path).exists():
        attributes_path = settings.attributes_path
    try:
        run_pipeline(catalog_path, attributes_path, output_path)
    except CatalogError as e:
        _fail(e)


@cli.command()
@click.option("--catalog", "catalog_path", default=None, help="Brand catalog JSON")
@click.option("--output", "output_path", default=None, help="Grouped catalog output path")
def group(catalog_path: str | None, output_path: str | None) -> None:
    """Group each brand's products by comparison key (all groups, singletons included)."""
    from product_families.catalog import load_catalog, write_grouped_catalog
    from product_families.clustering import cluster_catalog
    from product_families.text.vocabulary import get_vocabulary

    vocabulary = get_vocabulary(settings.cluster_vocabulary)
    try:
        catalog = load_catalog(catalog_path or settings.catalog_path)
    except CatalogError as e:
        _fail(e)
        return
    clusters = cluster_catalog(catalog, vocabulary)
    write_grouped_catalog(
        clusters,
        output_path or settings.grouped_catalog_path,
        {"vocabulary": vocabulary.label, "description": vocabulary.description},
    )


@cli.command("fetch-attributes")
@click.option("--input", "input_path", default=None, help="Products JSON (flat array or brand catalog)")
@click.option("--output", "output_path", default=None, help="Results output path")
@click.option("--errors", "errors_path", default=None, help="Error report output path")
@click.option("--concurrency", default=None, type=int, help="Concurrent requests (default from settings)")
@click.option("--retries", default=None, type=int, help="Attempts per product (default from settings)")
def fetch_attributes(
    input_path: str | None,
    output_path: str | None,
    errors_path: str | None,
    concurrency: int | None,
    retries: int | None,
) -> None:
    """Fetch specification attributes for every product."""
    from product_families.catalog import load_products
    from product_families.fetcher import fetch_all_attributes, log_progress, write_fetch_results

    try:
        products = load_products(input_path or settings.catalog_path)
    except CatalogError as e:
        _fail(e)
        return

    output_path = output_path or settings.attributes_path
    report = asyncio.run(fetch_all_attributes(
        products,
        concurrency=concurrency,
        retry_attempts=retries,
        checkpoint_path=f"{output_path}.partial",
        on_progress=log_progress,
    ))
    write_fetch_results(report, output_path, errors_path or settings.attribute_errors_path)


@cli.command()
@click.option("--snapshot", "snapshot_path", default=None, help="Family snapshot path")
@click.option("--warnings/--no-warnings", default=True, help="Show warnings as well as errors")
def verify(snapshot_path: str | None, warnings: bool) -> None:
    """Check a family snapshot's invariants. Exits 1 when any error is found."""
    from product_families.catalog import load_snapshot
    from product_families.verify import verify_snapshot

    path = snapshot_path or settings.snapshot_path
    try:
        snapshot = load_snapshot(path)
    except CatalogError as e:
        _fail(e)
        return

    issues = verify_snapshot(snapshot)
    errors = [i for i in issues if i.level == "error"]

    click.echo(f"\n{BOLD}Verify — {path}{RESET}\n")
    for issue in issues:
        if issue.level == "warning" and not warnings:
            continue
        marker = f"{RED}✗{RESET}" if issue.level == "error" else f"{YELLOW}–{RESET}"
        where = issue.family_id or "snapshot"
        click.echo(f"  {marker} {where:<18} {issue.message}")

    color = GREEN if not errors else RED
    click.echo(
        f"\n  {color}{len(snapshot.families)} families, {len(errors)} errors, "
        f"{len(issues) - len(errors)} warnings{RESET}\n"
    )
    if errors:
        raise SystemExit(1)


@cli.command()
@click.option("--snapshot", "snapshot_path", default=None, help="Family snapshot path")
@click.option("--output", "output_path", default=None, help="Write the palette JSON here instead of stdout")
def colors(snapshot_path: str | None, output_path: str | None) -> None:
    """List every distinct color option across the snapshot's families."""
    from product_families.catalog import load_snapshot
    from product_families.verify import collect_colors

    try:
        snapshot = load_snapshot(snapshot_path or settings.snapshot_path)
    except CatalogError as e:
        _fail(e)
        return

    palette = collect_colors(snapshot)
    if output_path is None:
        for color in palette:
            click.echo(color)
        return

    payload = {
        "_metadata": {
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "totalColors": len(palette),
        },
        "colors": palette,
    }
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    log.info(f"  {GREEN}✓{RESET} {len(palette)} colors written: {path}")


@cli.command()
@click.option("--snapshot", "snapshot_path", default=None, help="Family snapshot path")
@click.option("--batch-size", default=500, help="Documents per Meilisearch request")
def index(snapshot_path: str | None, batch_size: int) -> None:
    """Sync the family snapshot into Meilisearch."""
    from product_families.catalog import load_snapshot
    from product_families.search import sync_families

    try:
        snapshot = load_snapshot(snapshot_path or settings.snapshot_path)
    except CatalogError as e:
        _fail(e)
        return
    sync_families(snapshot, batch_size=batch_size)


@cli.command()
@click.argument("query")
@click.option("--brand", default=None, help="Only families of this brand")
@click.option("--limit", default=20, help="Max results")
def search(query: str, brand: str | None, limit: int) -> None:
    """Free-text search over indexed families."""
    from product_families.search import search_families

    result = search_families(query, limit=limit, brand=brand)
    hits = result.get("hits", [])

    click.echo(f"\n{BOLD}{len(hits)} families for {query!r}{RESET}\n")
    for hit in hits:
        axes = ", ".join(f"{k}: {len(v)}" for k, v in hit.get("variantOptions", {}).items())
        click.echo(
            f"  {hit['id']}  {hit['brand']:<16} {hit['title']}  "
            f"{DIM}({hit['variantCount']} variants; {axes or 'no options'}){RESET}"
        )
    click.echo("")


if __name__ == "__main__":
    cli()
