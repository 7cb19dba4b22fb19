from product_families.text.family_title import (
    capitalize_word,
    common_prefix,
    longest_common_run,
    strip_variable_parts,
    synthesize_title,
)


def test_grab_rail_title():
    titles = [
        "Mizu Drift 600mm Grab Rail Polished Stainless Steel",
        "Mizu Drift 700mm Grab Rail Polished Stainless Steel",
    ]
    assert synthesize_title(titles) == "Mizu Drift Grab Rail"


def test_material_color_title():
    titles = [
        "Geberit Sigma80 Sensor Plate Black Glass",
        "Geberit Sigma80 Sensor Plate Reflective Glass",
    ]
    assert synthesize_title(titles) == "Geberit Sigma80 Sensor Plate"


def test_temperature_and_star_rating_stripped():
    titles = [
        "Enware Aqua Tap (Cold) 7 Seconds (6 Star)",
        "Enware Aqua Tap (Warm) 7 Seconds (6 Star)",
    ]
    assert synthesize_title(titles) == "Enware Aqua Tap 7 Seconds"


def test_direction_stripped():
    titles = ["Kado Lux Bath Left Hand 1700mm", "Kado Lux Bath Right Hand 1700mm"]
    assert synthesize_title(titles) == "Kado Lux Bath"


def test_run_is_contiguous():
    titles = ["Alpha Beta Gamma Delta", "Beta Gamma Alpha Delta"]
    # "alpha" and "delta" appear in both, but only "beta gamma" is contiguous in both
    assert synthesize_title(titles) == "Beta Gamma"


def test_longest_common_run_ties_go_to_first_found():
    assert longest_common_run([["a", "b", "c", "d"], ["c", "d", "x", "a", "b"]]) == ["a", "b"]
    assert longest_common_run([["a"], ["b"]]) == []
    assert longest_common_run([]) == []


def test_prefix_fallback_when_nothing_shared():
    titles = ["Alpha Beta", "Gamma Delta"]
    assert synthesize_title(titles) == "Alpha"
    assert common_prefix([["x", "y"], ["x", "z"]]) == ["x"]


def test_single_title_unchanged():
    assert synthesize_title(["Mizu Drift 600mm Grab Rail Chrome"]) == "Mizu Drift 600mm Grab Rail Chrome"
    assert synthesize_title([]) == ""


def test_casing_rules():
    assert capitalize_word("iii") == "III"
    assert capitalize_word("axa", {"axa": "AXA"}) == "AXA"
    assert capitalize_word("sigma80") == "Sigma80"
    titles = ["axa uno ii wall basin white", "axa uno ii wall basin black"]
    assert synthesize_title(titles) == "AXA Uno II Wall Basin"


def test_frame_for_basin_rewrite():
    titles = ["Kado Frame For Basin 600mm Oak", "Kado Frame For Basin 900mm Walnut"]
    assert synthesize_title(titles) == "Kado Basin Frame"


def test_everything_variable_falls_back_to_raw_words():
    titles = ["600mm Matte Black", "600mm Matte White"]
    # both titles strip to nothing, so their raw words are compared instead
    assert synthesize_title(titles) == "600mm Matte"


def test_strip_variable_parts_keeps_plain_words():
    assert strip_variable_parts("Linsol Mixer Grey & Chrome 1200 x 900mm") == "Linsol Mixer"
    assert strip_variable_parts("Stiletto Bath 300mm-400mm x 750mm") == "Stiletto Bath"
