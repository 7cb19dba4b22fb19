"""Typed records for catalog input, specification data and family snapshots.

JSON keys stay camelCase on the wire (``productCode``, ``variantOptions``)
through an alias generator; Python code uses snake_case attributes.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

SPECIFICATIONS_GROUP = "Specifications"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SpecAttribute(CamelModel):
    id: int | str | None = None
    name: str
    values: list[str] = Field(default_factory=list)
    uom: str | None = None

    @field_validator("values", mode="before")
    @classmethod
    def _coerce_values(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            value = [value]
        return [str(v) for v in value if v is not None]


class SpecGroup(CamelModel):
    name: str
    attributes: list[SpecAttribute] = Field(default_factory=list)


class ProductAttributes(CamelModel):
    """Attribute payload returned by ``GET /products/{code}/attributes``."""

    groups: list[SpecGroup] = Field(default_factory=list)

    def specifications(self) -> SpecGroup | None:
        for group in self.groups:
            if group.name == SPECIFICATIONS_GROUP:
                return group
        return None


class Product(CamelModel):
    product_code: str
    product_title: str
    is_vap: bool | None = None
    attributes: ProductAttributes | None = None
    attribute_error: str | None = None

    @field_validator("product_code", mode="before")
    @classmethod
    def _code_as_str(cls, value: Any) -> str:
        return str(value)


AttributeValue = str | list[str]
AttributeMap = dict[str, AttributeValue]


class Variant(CamelModel):
    product_code: str
    product_title: str
    attributes: AttributeMap = Field(default_factory=dict)
    source_attributes: ProductAttributes | None = None
    is_vap: bool | None = None


class Family(CamelModel):
    model_config = ConfigDict(frozen=True)

    family_id: str
    title: str
    brand: str
    variant_count: int
    variant_options: dict[str, list[str]] = Field(default_factory=dict)
    variants: list[Variant] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_variant_count(self) -> "Family":
        if self.variant_count != len(self.variants):
            raise ValueError(
                f"variantCount {self.variant_count} != {len(self.variants)} variants "
                f"for family {self.family_id}"
            )
        return self


class SnapshotStatistics(CamelModel):
    total_families: int
    total_products_in_families: int
    average_variants_per_family: str


class SnapshotMetadata(CamelModel):
    version: int = 1
    description: str = ""
    source_files: list[str] = Field(default_factory=list)
    generated_at: str
    vocabulary: dict[str, str] = Field(default_factory=dict)
    statistics: SnapshotStatistics
    variant_types: list[str] = Field(default_factory=list)


class FamilySnapshot(CamelModel):
    metadata: SnapshotMetadata = Field(alias="_metadata")
    families: list[Family] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_statistics(self) -> "FamilySnapshot":
        stats = self.metadata.statistics
        if stats.total_families != len(self.families):
            raise ValueError(
                f"totalFamilies {stats.total_families} != {len(self.families)} families"
            )
        products = sum(f.variant_count for f in self.families)
        if stats.total_products_in_families != products:
            raise ValueError(
                f"totalProductsInFamilies {stats.total_products_in_families} != {products}"
            )
        return self


class FetchError(CamelModel):
    product_code: str
    error: str


class FetchProgress(BaseModel):
    processed: int
    total: int
    errors: int
    elapsed: float

    @property
    def rate(self) -> float:
        return self.processed / self.elapsed if self.elapsed > 0 else 0.0


class FetchReport(BaseModel):
    results: list[Product] = Field(default_factory=list)
    errors: list[FetchError] = Field(default_factory=list)
    elapsed: float = 0.0


class VerificationIssue(BaseModel):
    level: Literal["error", "warning"]
    family_id: str | None = None
    message: str
