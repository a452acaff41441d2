import pytest
from consensus.normalize import choose, is_generic

PAIRS = [
    ("KINASE", "Kinase"),
    ("kinase", "Kinase"),
    ("kinase (ATP", "kinase (ATP)"),
    ("Kinase [x", "Kinase [x]"),
    ("(Kinase)", "Kinase ("),
    ("Protein kinase C", "Protein kinase C1"),
    ("Protein B", "Protein A"),
    ("same", "same"),
]


@pytest.mark.parametrize("a,b", PAIRS)
def test_choose_is_symmetric(a, b):
    assert choose(a, b) == choose(b, a)


def test_choose_precedence():
    assert choose("KINASE", "Kinase") == "Kinase"
    assert choose("kinase", "Kinase") == "Kinase"
    assert choose("kinase (ATP", "kinase (ATP)") == "kinase (ATP)"
    assert choose("Protein kinase C1", "Protein kinase C") == "Protein kinase C"
    assert choose("Protein B", "Protein A") == "Protein A"


def test_generic_markers():
    assert is_generic("Unknown Protein")
    assert is_generic("similar to hypothetical protein XP_1")
    assert not is_generic("protein kinase")
