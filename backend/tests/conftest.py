import json

import pytest

from product_families.models import Product, SpecAttribute, SpecGroup


def make_products(*titles, start=1000):
    return [Product(product_code=str(start + i), product_title=t) for i, t in enumerate(titles)]


@pytest.fixture
def grab_rails():
    return make_products(
        "Mizu Drift 600mm Grab Rail Polished Stainless Steel",
        "Mizu Drift 700mm Grab Rail Polished Stainless Steel",
    )


@pytest.fixture
def sensor_plates():
    return make_products(
        "Geberit Sigma80 Sensor Plate Black Glass",
        "Geberit Sigma80 Sensor Plate Reflective Glass",
        start=2000,
    )


@pytest.fixture
def temperature_taps():
    return make_products(
        "Enware Aqua Tap (Cold) 7 Seconds (6 Star)",
        "Enware Aqua Tap (Warm) 7 Seconds (6 Star)",
        start=3000,
    )


@pytest.fixture
def sample_catalog(grab_rails, sensor_plates):
    return {
        "Mizu": grab_rails + make_products("Mizu Soothe Bath Spout", start=1500),
        "Geberit": sensor_plates,
    }


@pytest.fixture
def width_specs():
    """Two shower rails: one exposes Width, the other an equal Minimum/Maximum Width."""
    return {
        "4000": SpecGroup(name="Specifications", attributes=[
            SpecAttribute(name="Width", values=["900"], uom="mm"),
        ]),
        "4001": SpecGroup(name="Specifications", attributes=[
            SpecAttribute(name="Minimum Width", values=["1200"], uom="mm"),
            SpecAttribute(name="Maximum Width", values=["1200"], uom="mm"),
        ]),
    }


@pytest.fixture
def catalog_file(tmp_path, sample_catalog):
    payload = {
        "_metadata": {"generatedAt": "2024-01-01T00:00:00Z"},
        **{
            brand: [p.to_json_dict() for p in products]
            for brand, products in sample_catalog.items()
        },
    }
    path = tmp_path / "products.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
