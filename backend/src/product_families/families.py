"""Family assembly: stable ids, variants with extracted attributes, merging.

Clusters found independently can synthesize to the same title; the
(brand, title) hash is the merge key that unions them into one family.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping

from product_families.models import Family, Product, ProductAttributes, SpecGroup, Variant
from product_families.options import aggregate_options
from product_families.text.attributes import extract_attributes
from product_families.text.family_title import synthesize_title
from product_families.text.normalize import collapse_whitespace
from product_families.text.vocabulary import Vocabulary
from product_families.utils.logging import get_logger, YELLOW, RESET

log = get_logger()

FAMILY_ID_PREFIX = "fam_"
FAMILY_ID_LENGTH = 12


def assign_family_id(brand: str, title: str) -> str:
    """Deterministic id for a (brand, title) pair, e.g. ``fam_3f2a9c0d41be``."""
    digest = hashlib.md5(f"{brand}-{title}".lower().encode("utf-8")).hexdigest()
    return f"{FAMILY_ID_PREFIX}{digest[:FAMILY_ID_LENGTH]}"


def build_variant(
    product: Product,
    family_title: str,
    spec_group: SpecGroup | None = None,
) -> Variant:
    return Variant(
        product_code=product.product_code,
        product_title=collapse_whitespace(product.product_title),
        attributes=extract_attributes(product.product_title, family_title, spec_group),
        source_attributes=ProductAttributes(groups=[spec_group]) if spec_group else None,
        is_vap=product.is_vap,
    )


def build_family(
    brand: str,
    products: list[Product],
    specs: Mapping[str, SpecGroup] | None = None,
    vocabulary: Vocabulary | None = None,
) -> Family:
    """Family for one cluster: synthesized title, id, variants and option axes."""
    specs = specs or {}
    title = synthesize_title([p.product_title for p in products], vocabulary)
    variants = [build_variant(p, title, specs.get(p.product_code)) for p in products]
    return Family(
        family_id=assign_family_id(brand, title),
        title=title,
        brand=brand,
        variant_count=len(variants),
        variant_options=aggregate_options(variants),
        variants=variants,
    )


def _dedupe_variants(variants: Iterable[Variant], family_id: str) -> list[Variant]:
    seen: set[str] = set()
    unique: list[Variant] = []
    for variant in variants:
        if variant.product_code in seen:
            log.warning(
                f"  {YELLOW}–{RESET} duplicate product {variant.product_code} "
                f"dropped from {family_id}"
            )
            continue
        seen.add(variant.product_code)
        unique.append(variant)
    return unique


def merge_families(families: Iterable[Family]) -> list[Family]:
    """Union families that share (brand, title), keeping first-seen order.

    Variant lists are concatenated (a product code appears at most once) and
    option axes are recomputed over the union. Families left with fewer than
    two variants are dropped.
    """
    grouped: dict[tuple[str, str], list[Family]] = {}
    for family in families:
        grouped.setdefault((family.brand, family.title), []).append(family)

    merged: list[Family] = []
    for (brand, title), members in grouped.items():
        family_id = assign_family_id(brand, title)
        variants = _dedupe_variants(
            (v for member in members for v in member.variants), family_id
        )
        if len(variants) < 2:
            continue
        if len(members) == 1 and len(variants) == members[0].variant_count:
            merged.append(members[0])
            continue
        merged.append(
            Family(
                family_id=family_id,
                title=title,
                brand=brand,
                variant_count=len(variants),
                variant_options=aggregate_options(variants),
                variants=variants,
            )
        )
    return merged
