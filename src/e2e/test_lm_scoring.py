import pytest
from consensus.errors import ModelTrainingFailure
from consensus.lm import LanguageModel, score_frequency, score_overrepresentation


def test_frequency_ranks_by_weighted_count():
    fg = LanguageModel(2, min_occurrence=1)
    fg.train("gamma delta", 2)
    fg.train("alpha beta", 10)
    ranked = score_frequency(fg, 2, top_k=5)
    assert ranked == [(10.0, ("alpha", "beta")), (2.0, ("gamma", "delta"))]
    assert score_frequency(fg, 2, top_k=1) == [(10.0, ("alpha", "beta"))]


def test_unseen_phrase_beats_common_phrase():
    bg = LanguageModel(2)
    bg.train_all([("common phrase", 50), ("other words here", 50)])
    fg = LanguageModel(2)
    fg.train_all([("common phrase", 5), ("novel phrase", 5)])
    scores = {" ".join(t): s for s, t in score_overrepresentation(fg, bg, 2, min_count=2, top_k=10)}
    assert scores["novel phrase"] > scores["common phrase"]


def test_min_count_filters_rare_phrases():
    bg = LanguageModel(2)
    fg = LanguageModel(2, min_occurrence=1)
    fg.train_all([("rare pair", 1), ("frequent pair", 3)])
    ranked = score_overrepresentation(fg, bg, 2, min_count=2, top_k=10)
    assert [t for _, t in ranked] == [("frequent", "pair")]


def test_unseen_sequences_get_finite_probability():
    bg = LanguageModel(3)
    bg.train_all([("a b c", 4)])
    p = bg.probability(("zzz", "yyy", "xxx"))
    assert 0 < p < 1
    assert bg.probability(("a", "b", "c")) > p


def test_pruning_keeps_totals():
    m = LanguageModel(2, min_occurrence=2)
    m.train_all([("a b", 1), ("c d", 3)])
    assert m.count(("a", "b")) == 0
    assert m.count(("c", "d")) == 3
    assert m.total(2) == 4
    assert m.vocabulary_size == 4


@pytest.mark.parametrize("weight", [-1, 1.5, float("nan"), float("inf"), "x"])
def test_bad_training_weights_raise(weight):
    with pytest.raises(ModelTrainingFailure):
        LanguageModel(2).train("a b", weight)


def test_integral_float_weight_is_accepted():
    m = LanguageModel(2)
    m.train("a b", 2.0)
    assert m.count(["a", "b"]) == 2
