"""Meilisearch integration for free-text family search.

Each family becomes one flat document. The index is derived from the family
snapshot and can always be rebuilt from it.
"""

from __future__ import annotations

import meilisearch
from meilisearch.errors import MeilisearchApiError

from product_families.config import settings
from product_families.models import Family, FamilySnapshot
from product_families.utils.logging import get_logger, GREEN, BOLD, RESET

log = get_logger()

SEARCHABLE_ATTRS = ["title", "brand", "variantTitles", "productCodes", "colors"]
FILTERABLE_ATTRS = ["brand", "variantCount", "optionAxes"]
SORTABLE_ATTRS = ["variantCount", "title"]


def get_client() -> meilisearch.Client:
    return meilisearch.Client(settings.meilisearch_url, settings.meilisearch_api_key or None)


def family_document(family: Family) -> dict:
    """Flat, indexable view of a family."""
    return {
        "id": family.family_id,
        "title": family.title,
        "brand": family.brand,
        "variantCount": family.variant_count,
        "variantOptions": family.variant_options,
        "optionAxes": sorted(family.variant_options),
        "productCodes": [v.product_code for v in family.variants],
        "variantTitles": [v.product_title for v in family.variants],
        "colors": family.variant_options.get("color", []),
        "variants": [v.to_json_dict() for v in family.variants],
    }


def _configure_index(client: meilisearch.Client, index_name: str) -> None:
    """Create index and set searchable/filterable attributes."""
    try:
        client.get_index(index_name)
    except MeilisearchApiError:
        client.create_index(index_name, {"primaryKey": "id"})
        log.info(f"  {GREEN}✓{RESET} Created index '{index_name}'")

    index = client.index(index_name)
    index.update_searchable_attributes(SEARCHABLE_ATTRS)
    index.update_filterable_attributes(FILTERABLE_ATTRS)
    index.update_sortable_attributes(SORTABLE_ATTRS)


def sync_families(
    snapshot: FamilySnapshot,
    batch_size: int = 500,
    client: meilisearch.Client | None = None,
    index_name: str | None = None,
) -> dict:
    """Upsert every family of a snapshot by familyId. Returns {indexed, total}."""
    client = client or get_client()
    index_name = index_name or settings.meilisearch_index
    _configure_index(client, index_name)
    index = client.index(index_name)

    total = len(snapshot.families)
    log.info(f"{BOLD}Syncing {total} families → Meilisearch{RESET}")

    indexed = 0
    for offset in range(0, total, batch_size):
        docs = [family_document(f) for f in snapshot.families[offset : offset + batch_size]]
        index.add_documents(docs)
        indexed += len(docs)
        log.info(f"  {GREEN}▸{RESET} {min(offset + batch_size, total)}/{total}")

    log.info(f"  {GREEN}✓{RESET} Indexed {indexed} families")
    return {"indexed": indexed, "total": total}


def search_families(
    query: str,
    limit: int = 20,
    brand: str | None = None,
    client: meilisearch.Client | None = None,
    index_name: str | None = None,
) -> dict:
    """Search families. Returns Meilisearch's {hits, query, processingTimeMs, ...}."""
    client = client or get_client()
    index = client.index(index_name or settings.meilisearch_index)

    params: dict = {
        "limit": limit,
        "attributesToRetrieve": ["id", "title", "brand", "variantCount", "variantOptions"],
    }
    if brand:
        escaped = brand.replace('"', '\\"')
        params["filter"] = f'brand = "{escaped}"'
    return index.search(query, params)
