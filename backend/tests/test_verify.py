from product_families.models import Family, Variant
from product_families.pipeline import build_families, build_snapshot
from product_families.verify import collect_colors, verify_family, verify_snapshot


def variant(code, **attributes):
    return Variant(product_code=code, product_title=f"Product {code}", attributes=attributes)


def unchecked_family(variants, options, variant_count=None, family_id="fam_000000000000"):
    # model_construct skips validation so broken families can be described
    return Family.model_construct(
        family_id=family_id,
        title="Title",
        brand="Brand",
        variant_count=len(variants) if variant_count is None else variant_count,
        variant_options=options,
        variants=variants,
    )


def messages(issues, level):
    return [i.message for i in issues if i.level == level]


def test_built_snapshot_is_clean(sample_catalog, temperature_taps):
    snapshot = build_snapshot(build_families({**sample_catalog, "Enware": temperature_taps}))
    assert [i for i in verify_snapshot(snapshot) if i.level == "error"] == []


def test_count_and_size_errors():
    family = unchecked_family([variant("1", color="White")], {}, variant_count=2)
    errors = messages(verify_family(family), "error")
    assert "variantCount 2 != 1 variants" in errors
    assert "family has fewer than 2 variants" in errors


def test_duplicate_codes_and_bad_axes():
    family = unchecked_family(
        [variant("1", color="White"), variant("1", color="White")],
        {"color": ["White", "White"], "finish": ["Matte"]},
    )
    errors = messages(verify_family(family), "error")
    assert "duplicate product codes: 1" in errors
    assert "option 'color' has duplicate values" in errors
    assert "option 'finish' has fewer than 2 values" in errors


def test_unbacked_axis_and_unreachable_selection_warn():
    family = unchecked_family(
        [variant("1", color="White"), variant("2", color="Black")],
        {"color": ["Black", "White"], "temperature": ["Cold", "Hot"]},
    )
    warnings = messages(verify_family(family), "warning")
    assert "option 'temperature' is not carried by any variant" in warnings
    assert any(w.startswith("first-value selection") for w in warnings)


def test_family_without_options_warns():
    family = unchecked_family([variant("1"), variant("2")], {})
    assert messages(verify_family(family), "warning") == ["no option axis distinguishes the variants"]


def test_snapshot_level_checks(sample_catalog):
    families = build_families(sample_catalog)
    snapshot = build_snapshot(families)
    broken = snapshot.model_copy(update={"families": families + [families[0]]})
    errors = messages(verify_snapshot(broken), "error")
    assert "totalFamilies 2 != 3" in errors
    assert "duplicate familyId" in errors


def test_collect_colors(sample_catalog, temperature_taps):
    snapshot = build_snapshot(build_families({**sample_catalog, "Enware": temperature_taps}))
    assert collect_colors(snapshot) == ["Black Glass", "Reflective Glass"]
