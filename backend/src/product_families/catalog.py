"""Catalog, specification and snapshot files.

Input catalogs map brand -> products, either flat or already pre-grouped as
arrays of arrays (a previous grouping snapshot). Top-level keys starting with
an underscore (``_metadata``, ``_algorithmInfo``) are metadata, never brands.

An input that cannot be read or parsed is fatal: CatalogError is raised with
the file path so the run aborts instead of writing an empty snapshot.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from product_families.models import FamilySnapshot, Product, ProductAttributes, SpecGroup
from product_families.utils.logging import get_logger, GREEN, DIM, RESET

log = get_logger()

RESERVED_PREFIX = "_"


class CatalogError(Exception):
    """An input file is missing, unparseable or has the wrong shape."""


def is_reserved_key(key: str) -> bool:
    return key.startswith(RESERVED_PREFIX)


def _read_json(path: str | Path) -> Any:
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"{path}: file not found") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"{path}: invalid JSON ({e.msg} at line {e.lineno})") from e


def _write_json(payload: Any, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    return path


def _flatten(entries: list[Any]) -> list[Any]:
    flat: list[Any] = []
    for entry in entries:
        if isinstance(entry, list):
            flat.extend(entry)
        else:
            flat.append(entry)
    return flat


def parse_catalog(data: Any, source: str = "<catalog>") -> dict[str, list[Product]]:
    """Validate a decoded catalog into brand -> ordered products."""
    if not isinstance(data, dict):
        raise CatalogError(f"{source}: expected an object mapping brand -> products")

    catalog: dict[str, list[Product]] = {}
    for brand, entries in data.items():
        if is_reserved_key(brand):
            continue
        if not isinstance(entries, list):
            raise CatalogError(f"{source}: brand {brand!r} is not an array")
        try:
            catalog[brand] = [Product.model_validate(p) for p in _flatten(entries)]
        except ValidationError as e:
            raise CatalogError(f"{source}: invalid product under {brand!r}: {e}") from e
    return catalog


def load_catalog(path: str | Path) -> dict[str, list[Product]]:
    catalog = parse_catalog(_read_json(path), str(path))
    total = sum(len(p) for p in catalog.values())
    log.info(f"  {DIM}Loaded {total} products across {len(catalog)} brands from {path}{RESET}")
    return catalog


def load_products(path: str | Path) -> list[Product]:
    """Flat product list (the fetch job input); brand catalogs are flattened too."""
    data = _read_json(path)
    if isinstance(data, dict):
        return [p for products in parse_catalog(data, str(path)).values() for p in products]
    if not isinstance(data, list):
        raise CatalogError(f"{path}: expected an array of products")
    try:
        return [Product.model_validate(p) for p in data]
    except ValidationError as e:
        raise CatalogError(f"{path}: invalid product: {e}") from e


def parse_specifications(data: Any, source: str = "<attributes>") -> dict[str, SpecGroup]:
    """productCode -> "Specifications" group. Products without one are omitted."""
    if not isinstance(data, list):
        raise CatalogError(f"{source}: expected an array of products with attributes")

    specs: dict[str, SpecGroup] = {}
    for entry in data:
        if not isinstance(entry, dict) or "productCode" not in entry:
            raise CatalogError(f"{source}: entry without productCode")
        raw = entry.get("attributes")
        if not raw:
            continue
        try:
            group = ProductAttributes.model_validate(raw).specifications()
        except ValidationError as e:
            raise CatalogError(
                f"{source}: invalid attributes for {entry['productCode']}: {e}"
            ) from e
        if group is not None:
            specs[str(entry["productCode"])] = group
    return specs


def load_specifications(path: str | Path) -> dict[str, SpecGroup]:
    specs = parse_specifications(_read_json(path), str(path))
    log.info(f"  {DIM}Loaded specifications for {len(specs)} products from {path}{RESET}")
    return specs


def load_snapshot(path: str | Path) -> FamilySnapshot:
    try:
        return FamilySnapshot.model_validate(_read_json(path))
    except ValidationError as e:
        raise CatalogError(f"{path}: invalid family snapshot: {e}") from e


def write_snapshot(snapshot: FamilySnapshot, path: str | Path) -> Path:
    path = _write_json(snapshot.to_json_dict(), path)
    log.info(f"  {GREEN}✓{RESET} Snapshot written: {path}")
    return path


def write_grouped_catalog(
    clusters: dict[str, dict[str, list[Product]]],
    path: str | Path,
    algorithm_info: dict[str, Any] | None = None,
) -> Path:
    """Write brand -> [[product, ...], ...] with an ``_algorithmInfo`` header.

    The result can be fed back to ``load_catalog`` as a pre-grouped catalog.
    """
    info = dict(algorithm_info or {})
    info.setdefault("lastUpdated", datetime.now(timezone.utc).isoformat())
    payload: dict[str, Any] = {"_algorithmInfo": info}
    for brand, by_key in clusters.items():
        payload[brand] = [[p.to_json_dict() for p in group] for group in by_key.values()]
    path = _write_json(payload, path)
    log.info(f"  {GREEN}✓{RESET} Grouped catalog written: {path}")
    return path
