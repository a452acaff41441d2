from pathlib import Path
from consensus.models import ScoredPhrase
from consensus.normalize import TextMapping
from consensus.output import (ResultWriter, format_results, format_score, is_strange_punctuation,
                              remove_punctuation, remove_unmatched_braces)


def test_unmatched_braces_are_cut_iteratively():
    assert remove_unmatched_braces("kinase (putative") == "kinase"
    assert remove_unmatched_braces("domain) transporter") == "transporter"
    assert remove_unmatched_braces("[fragment] kinase (ATP") == "[fragment] kinase"
    assert remove_unmatched_braces("kinase {A [B") == "kinase"
    assert remove_unmatched_braces("kinase (ATP)") == "kinase (ATP)"


def test_punctuation_and_strange_fragments():
    assert remove_punctuation(", kinase -") == "kinase"
    assert remove_punctuation(".;:") == ""
    assert is_strange_punctuation("a, b")
    assert is_strange_punctuation("ab; c")
    assert not is_strange_punctuation("kinase, putative")


def test_score_formatting():
    assert format_score(3.0) == "3"
    assert format_score(2.5) == "2.5"
    assert format_score(1 / 3) == "0.3333"


def _mapping() -> TextMapping:
    tm = TextMapping()
    tm.convert("Protein kinase C", expand_subphrases=True)
    tm.convert("ab")
    return tm


def test_results_are_resolved_capped_and_filtered_by_score():
    tm = _mapping()
    ranked = {-5.0: {"protein kinase c"}, -2.0: {"kinase"}}
    assert format_results(ranked, tm, 0, 2) == [
        ScoredPhrase(5.0, "Protein kinase C"), ScoredPhrase(2.0, "kinase")]
    assert format_results(ranked, tm, 0, 1) == [ScoredPhrase(5.0, "Protein kinase C")]
    assert format_results(ranked, tm, 3, 5) == [ScoredPhrase(5.0, "Protein kinase C")]


def test_ties_prefer_longer_phrases():
    tm = _mapping()
    ranked = {-4.0: {"kinase", "protein kinase", "protein kinase c"}}
    assert [r.text for r in format_results(ranked, tm, 0, 3)] == [
        "Protein kinase C", "Protein kinase", "kinase"]


def test_unresolvable_and_short_phrases_fall_back_to_unknown(caplog):
    tm = _mapping()
    ranked = {-4.0: {"nothing here"}, -3.0: {"ab"}}
    assert format_results(ranked, tm, 0, 5) == [ScoredPhrase(1, "conserved unknown protein")]
    assert "nothing here" in caplog.text


def test_writer_creates_directories_and_appends(tmp_path: Path):
    out = tmp_path / "a" / "b" / "res.txt"
    with ResultWriter(str(out)) as w:
        assert w.write("Q1", [ScoredPhrase(2.0, "x y z")]) == 1
    with ResultWriter(str(out), append=True) as w:
        w.write("Q2", [ScoredPhrase(1.25, "u v")])
    assert out.read_text(encoding="utf-8") == "Q1\t2\tx y z\nQ2\t1.25\tu v\n"


def test_writer_defaults_to_stdout(capsys):
    with ResultWriter() as w:
        w.write("Q", [ScoredPhrase(1, "conserved unknown protein")])
    assert capsys.readouterr().out == "Q\t1\tconserved unknown protein\n"
