"""Brand clustering: groups each brand's products by normalized comparison key.

Algorithm:
    1. Flatten the brand's products (pre-grouped snapshots are arrays of arrays)
    2. Normalize every title to its comparison key
    3. Bucket products by key, preserving input order inside each bucket

One cluster is one candidate family. Clusters never cross brands, and a
cluster with a single product is a standalone item, not a family.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from product_families.models import Product
from product_families.text.normalize import normalize_title
from product_families.text.vocabulary import Vocabulary, get_vocabulary
from product_families.utils.logging import get_logger, DIM, RESET

log = get_logger()


def cluster_products(
    products: Iterable[Product],
    vocabulary: Vocabulary | None = None,
) -> dict[str, list[Product]]:
    """Group one brand's products by comparison key (stable, insertion-ordered)."""
    vocabulary = vocabulary or get_vocabulary("catalog")
    clusters: dict[str, list[Product]] = {}
    for product in products:
        key = normalize_title(product.product_title, vocabulary)
        clusters.setdefault(key, []).append(product)
    return clusters


def cluster_catalog(
    catalog: Mapping[str, Iterable[Product]],
    vocabulary: Vocabulary | None = None,
) -> dict[str, dict[str, list[Product]]]:
    """Cluster every brand independently. Returns brand -> key -> products."""
    vocabulary = vocabulary or get_vocabulary("catalog")
    result: dict[str, dict[str, list[Product]]] = {}
    for brand, products in catalog.items():
        result[brand] = cluster_products(products, vocabulary)

    total = sum(len(c) for c in result.values())
    multi = sum(1 for c in result.values() for group in c.values() if len(group) > 1)
    log.info(
        f"  {DIM}Clustered {len(result)} brands into {total} groups "
        f"({multi} with 2+ products){RESET}"
    )
    return result


def family_candidates(
    clusters: Mapping[str, Mapping[str, list[Product]]],
) -> list[tuple[str, list[Product]]]:
    """(brand, products) for every cluster that can become a family."""
    return [
        (brand, group)
        for brand, by_key in clusters.items()
        for group in by_key.values()
        if len(group) > 1
    ]
