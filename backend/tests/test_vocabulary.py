import pytest
from pydantic import ValidationError

from product_families.text.vocabulary import (
    Vocabulary,
    VocabularyEntry,
    get_vocabulary,
    get_vocabulary_names,
    vocabulary_from_config,
)


def test_named_configurations():
    assert {"catalog", "family-title"} <= set(get_vocabulary_names())
    assert get_vocabulary("catalog").label == "catalog@v6"
    assert get_vocabulary("family-title").casing["axa"] == "AXA"


def test_unknown_vocabulary():
    with pytest.raises(KeyError):
        get_vocabulary("does-not-exist")


def test_phrases_longest_first():
    phrases = get_vocabulary("catalog").phrases()
    lengths = [len(p) for p in phrases]
    assert lengths == sorted(lengths, reverse=True)
    assert phrases.index("polished stainless steel") < phrases.index("stainless steel")
    assert phrases.index("brushed nickel") < phrases.index("nickel")


def test_equal_length_keeps_config_order():
    vocab = Vocabulary(name="t", entries=(
        VocabularyEntry(phrase="red", tag="color"),
        VocabularyEntry(phrase="oak", tag="material"),
        VocabularyEntry(phrase="red", tag="color"),
    ))
    assert vocab.phrases() == ("red", "oak")


def test_tagged():
    vocab = get_vocabulary("catalog")
    assert "left hand" in vocab.tagged("direction")
    assert "left hand" not in vocab.tagged("color")


def test_remove_phrases_is_case_insensitive():
    vocab = vocabulary_from_config("t", {"entries": {"finish": ["Matte Black", "black"]}})
    assert vocab.remove_phrases("Basin MATTE BLACK").strip() == "Basin"


def test_vocabulary_is_immutable():
    vocab = get_vocabulary("catalog")
    with pytest.raises(ValidationError):
        vocab.name = "other"


def test_rewrites():
    vocab = get_vocabulary("family-title")
    assert vocab.apply_rewrites("Kado Frame For Basin") == "Kado Basin Frame"
