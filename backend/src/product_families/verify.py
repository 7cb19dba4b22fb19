"""Snapshot verification and color palette export.

verify_snapshot re-checks the invariants a family snapshot must hold before
it is published to the browsing UI, plus a softer check that picking the
first value of every option axis resolves to a real variant.
"""

from __future__ import annotations

from collections import Counter

from product_families.models import Family, FamilySnapshot, VerificationIssue
from product_families.options import DIMENSIONAL_KEYS, find_matching_variant

_KEY_ALIASES = {"size": "sizes", "dimension": "dimensions"}


def _axis_backed(family: Family, axis: str) -> bool:
    plural = _KEY_ALIASES.get(axis, axis + "s")
    singular = axis[:-1] if axis.endswith("s") else axis
    for variant in family.variants:
        keys = variant.attributes.keys()
        if axis in keys or plural in keys or singular in keys:
            return True
        if axis == "dimension" and any(k in DIMENSIONAL_KEYS for k in keys):
            return True
    return False


def verify_family(family: Family) -> list[VerificationIssue]:
    issues: list[VerificationIssue] = []

    def error(message: str) -> None:
        issues.append(VerificationIssue(level="error", family_id=family.family_id, message=message))

    def warning(message: str) -> None:
        issues.append(VerificationIssue(level="warning", family_id=family.family_id, message=message))

    if family.variant_count != len(family.variants):
        error(f"variantCount {family.variant_count} != {len(family.variants)} variants")
    if len(family.variants) < 2:
        error("family has fewer than 2 variants")
    if not family.title:
        error("family has an empty title")

    duplicates = [c for c, n in Counter(v.product_code for v in family.variants).items() if n > 1]
    if duplicates:
        error(f"duplicate product codes: {', '.join(sorted(duplicates))}")

    for axis, values in family.variant_options.items():
        if not axis:
            error("empty option axis name")
        if len(values) < 2:
            error(f"option {axis!r} has fewer than 2 values")
        if len(set(values)) != len(values):
            error(f"option {axis!r} has duplicate values")
        if not _axis_backed(family, axis):
            warning(f"option {axis!r} is not carried by any variant")

    if family.variant_options:
        first = {axis: values[0] for axis, values in family.variant_options.items() if values}
        if find_matching_variant(family, first) is None:
            warning(f"first-value selection {first} matches no variant")
    elif len(family.variants) > 1:
        warning("no option axis distinguishes the variants")
    return issues


def verify_snapshot(snapshot: FamilySnapshot) -> list[VerificationIssue]:
    """All issues across the snapshot: statistics first, then per family."""
    issues: list[VerificationIssue] = []
    stats = snapshot.metadata.statistics
    if stats.total_families != len(snapshot.families):
        issues.append(VerificationIssue(
            level="error",
            message=f"totalFamilies {stats.total_families} != {len(snapshot.families)}",
        ))
    products = sum(f.variant_count for f in snapshot.families)
    if stats.total_products_in_families != products:
        issues.append(VerificationIssue(
            level="error",
            message=f"totalProductsInFamilies {stats.total_products_in_families} != {products}",
        ))

    seen_ids: set[str] = set()
    for family in snapshot.families:
        if family.family_id in seen_ids:
            issues.append(VerificationIssue(
                level="error", family_id=family.family_id, message="duplicate familyId",
            ))
        seen_ids.add(family.family_id)
        issues.extend(verify_family(family))
    return issues


def collect_colors(snapshot: FamilySnapshot) -> list[str]:
    """Sorted palette of every color option value across all families."""
    colors: set[str] = set()
    for family in snapshot.families:
        colors.update(family.variant_options.get("color", []))
    return sorted(colors)
