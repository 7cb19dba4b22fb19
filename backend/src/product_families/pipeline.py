"""Family normalization pipeline orchestrator.

Wires catalog loading, brand clustering, family title synthesis, attribute
extraction and option aggregation into one synchronous run that produces an
immutable family snapshot. Re-running produces a new snapshot; nothing is
updated in place.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path

from product_families.catalog import load_catalog, load_specifications, write_snapshot
from product_families.clustering import cluster_catalog, family_candidates
from product_families.config import settings
from product_families.families import build_family, merge_families
from product_families.models import (
    Family,
    FamilySnapshot,
    Product,
    SnapshotMetadata,
    SnapshotStatistics,
    SpecGroup,
)
from product_families.text.vocabulary import Vocabulary, get_vocabulary
from product_families.utils.logging import get_logger, GREEN, YELLOW, BOLD, DIM, RESET

log = get_logger()

SNAPSHOT_VERSION = 3

VARIANT_TYPES = [
    "Size variations (e.g., 1200x900mm, 630mm)",
    "Material/finish variations (e.g., Matte Black, Polished Chrome)",
    "Color variations (e.g., White, Grey, Black)",
    "Directional variations (e.g., Left Hand, Right Hand)",
    "Temperature variations (e.g., Cold, Warm, Hot)",
]


def build_families(
    catalog: Mapping[str, list[Product]],
    specs: Mapping[str, SpecGroup] | None = None,
    cluster_vocabulary: Vocabulary | None = None,
    title_vocabulary: Vocabulary | None = None,
) -> list[Family]:
    """Cluster every brand and turn each 2+ product cluster into a family."""
    cluster_vocabulary = cluster_vocabulary or get_vocabulary(settings.cluster_vocabulary)
    title_vocabulary = title_vocabulary or get_vocabulary(settings.title_vocabulary)

    clusters = cluster_catalog(catalog, cluster_vocabulary)
    families = [
        build_family(brand, products, specs, title_vocabulary)
        for brand, products in family_candidates(clusters)
    ]
    merged = merge_families(families)
    if len(merged) != len(families):
        log.info(f"  {DIM}Merged {len(families)} clusters into {len(merged)} families{RESET}")
    return merged


def build_snapshot(
    families: list[Family],
    source_files: list[str] | None = None,
    vocabularies: list[Vocabulary] | None = None,
) -> FamilySnapshot:
    """Wrap families with metadata whose statistics are computed from them."""
    total_products = sum(f.variant_count for f in families)
    average = total_products / len(families) if families else 0.0
    return FamilySnapshot(
        metadata=SnapshotMetadata(
            version=SNAPSHOT_VERSION,
            description=(
                "Product families with 2+ variants. Titles are the longest word run "
                "shared by a cluster's titles after size, color, material, direction "
                "and temperature terms are removed; dimension options are named from "
                "specification attributes when available."
            ),
            source_files=source_files or [],
            generated_at=datetime.now(timezone.utc).isoformat(),
            vocabulary={v.name: v.label for v in vocabularies or []},
            statistics=SnapshotStatistics(
                total_families=len(families),
                total_products_in_families=total_products,
                average_variants_per_family=f"{average:.2f}",
            ),
            variant_types=VARIANT_TYPES,
        ),
        families=families,
    )


def run_pipeline(
    catalog_path: str | Path | None = None,
    attributes_path: str | Path | None = None,
    output_path: str | Path | None = None,
) -> FamilySnapshot:
    """Load the catalog (and optional specifications), build and write a snapshot.

    A missing specifications file is not an error: dimensions then keep their
    generic names. An unreadable catalog raises CatalogError.
    """
    catalog_path = Path(catalog_path or settings.catalog_path)
    output_path = Path(output_path or settings.snapshot_path)
    start = time.monotonic()

    log.info(f"{BOLD}NORMALIZE{RESET} — {catalog_path}")
    catalog = load_catalog(catalog_path)
    source_files = [catalog_path.name]

    specs: dict[str, SpecGroup] = {}
    if attributes_path is not None and Path(attributes_path).exists():
        specs = load_specifications(attributes_path)
        source_files.append(Path(attributes_path).name)
    elif attributes_path is not None:
        log.warning(f"  {YELLOW}–{RESET} {attributes_path} not found, using generic dimension names")

    cluster_vocabulary = get_vocabulary(settings.cluster_vocabulary)
    title_vocabulary = get_vocabulary(settings.title_vocabulary)
    families = build_families(catalog, specs, cluster_vocabulary, title_vocabulary)
    snapshot = build_snapshot(families, source_files, [cluster_vocabulary, title_vocabulary])
    write_snapshot(snapshot, output_path)

    stats = snapshot.metadata.statistics
    elapsed = time.monotonic() - start
    log.info(
        f"\n{BOLD}Normalization complete{RESET} in {elapsed:.1f}s — "
        f"{GREEN}{stats.total_families}{RESET} families, "
        f"{stats.total_products_in_families} products, "
        f"{stats.average_variants_per_family} variants/family"
    )
    return snapshot
