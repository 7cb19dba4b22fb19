import pytest

from product_families.text.normalize import normalize_title, strip_sizes


def test_sizes_and_finish_removed():
    assert normalize_title("Mizu Drift 600mm Grab Rail Polished Stainless Steel") == "mizu drift grab rail"
    assert normalize_title("Mizu Drift 700mm Grab Rail Polished Stainless Steel") == "mizu drift grab rail"


def test_multi_dimension_sizes():
    assert normalize_title("Stiletto Bath 1700 x 750mm White") == "stiletto bath"
    assert normalize_title("Stiletto Bath 1500x700x450 Matte Black") == "stiletto bath"


def test_area_coverage_removed():
    assert normalize_title("Thermogroup Underfloor Heating Pack (10m2)") == "thermogroup underfloor heating pack"
    assert normalize_title("Thermogroup Underfloor Heating Pack 5 m2") == "thermogroup underfloor heating pack"


def test_under_floor_spelling():
    assert normalize_title("Thermogroup Under  Floor Heating Pack") == normalize_title(
        "Thermogroup Underfloor Heating Pack"
    )


def test_color_combination_removed():
    assert normalize_title("Linsol Mixer Grey/Chrome") == "linsol mixer"


def test_multi_word_phrase_before_its_parts():
    # "matte opium black" must go as one phrase, leaving no "opium" behind
    assert normalize_title("Soko Basin Mixer Matte Opium Black") == "soko basin mixer"


def test_whole_words_only():
    # "hot" must not be removed from inside "photo", nor "red" from "shredder"
    assert normalize_title("Photo Frame Shredder") == "photo frame shredder"


def test_direction_and_temperature_removed():
    assert normalize_title("Kado Lux Bath Left Hand") == normalize_title("Kado Lux Bath Right Hand")
    assert normalize_title("Tap (Cold)") == normalize_title("Tap (Hot)") == "tap"


def test_numbers_without_units_kept():
    assert normalize_title("Wels 10 More Stars") == "wels 10 more stars"


def test_only_variable_tokens_gives_empty_key():
    assert normalize_title("600mm Matte Black") == ""
    assert normalize_title("") == ""


@pytest.mark.parametrize("title", [
    "Mizu Drift 600mm Grab Rail Polished Stainless Steel",
    "Thermogroup Under Floor Heating Pack (10m2)",
    "Linsol Mixer Grey/Chrome (Warm)",
    "  Geberit   Sigma80 Sensor Plate Black Glass ",
    "Left Right Hand Hot Cold",
])
def test_idempotent(title):
    key = normalize_title(title)
    assert normalize_title(key) == key


def test_strip_sizes_keeps_model_numbers():
    assert strip_sizes("sigma80 plate 600mm").strip() == "sigma80 plate"
