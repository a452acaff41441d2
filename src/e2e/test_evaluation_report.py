from pathlib import Path
import pytest
from consensus.evaluation import (Comparison, Report, clean_annotation, compare, evaluate,
                                  is_undefined, main, read_manual_annotations, read_predictions)


def test_undefined_descriptions():
    assert is_undefined("Hypothetical protein")
    assert is_undefined("hypothetical protein XP_1234")
    assert not is_undefined("hypothetical protein kinase domain")
    assert not is_undefined("ABC transporter")


def test_clean_annotation_strips_affixes():
    assert clean_annotation("Putative ABC transporter-like protein") == "abc transporter"
    assert clean_annotation("Probable DNA ligase homolog") == "dna ligase"


def test_compare():
    assert compare("abc transporter", "abc transporter") is Comparison.EQUAL
    assert compare("abc transporter", "transporter") is Comparison.SHORTER
    assert compare("ATP-dependent helicase", "ATP dependent helicase") is Comparison.EQUAL
    assert compare("helicase", "ATP dependent helicase") is Comparison.LONGER
    assert compare("kinase", "helicase") is Comparison.DIFFERENT


def test_evaluate_counts_every_outcome(caplog):
    manuals = {
        "p1": ["Protein kinase C"],
        "p2": ["hypothetical protein"],
        "p3": ["ABC transporter"],
        "p4": ["DNA polymerase"],
        "p5": ["Heat shock protein 70"],
        "p6": ["hypothetical protein"],
        "p7": ["large ribosomal subunit L3", "50S ribosomal protein L3"],
    }
    predictions = {
        "p1": ["putative protein kinase C"],
        "p2": ["conserved unknown protein"],
        "p3": ["hypothetical protein"],
        "p4": ["DNA polymerase III"],
        "p6": ["kinase"],
        "p7": ["50S ribosomal protein L3"],
        "extra": ["not in the gold standard"],
    }
    r = evaluate(manuals, predictions)
    assert (r.tp, r.tn, r.fn, r.longer, r.invented, r.skipped) == (2, 1, 1, 1, 1, 1)
    assert r.next_manual_consulted == 1
    assert r.fp == 2 and r.total == 6
    assert r.gold_negatives == 2 and r.gold_positives == 4
    assert r.precision == pytest.approx(50.0)
    assert r.recall == pytest.approx(50.0)
    assert r.f_score == pytest.approx(50.0)
    assert r.specificity == pytest.approx(50.0)
    assert r.equal_affixes == {"Protein kinase C <-> putative protein kinase C": 1}
    assert "p5" in caplog.text


def test_empty_report_is_zero_division_safe():
    r = Report()
    assert (r.precision, r.recall, r.f_score, r.specificity) == (0.0, 0.0, 0.0, 0.0)
    assert r.lines()[0] == "Performance"


@pytest.mark.e2e
def test_readers_and_main(tmp_path: Path, capsys):
    manual = tmp_path / "manual.txt"
    manual.write_text("id\tannotation\np1\tABC transporter\tabc transporter\np2\tkinase\n",
                      encoding="utf-8")
    preds = tmp_path / "preds.txt"
    preds.write_text("p1\t12\tABC transporter\np2\t3\tkinase\nshort line\n", encoding="utf-8")
    assert read_manual_annotations(str(manual), skip_header=True) == {
        "p1": ["ABC transporter", "abc transporter"], "p2": ["kinase"]}
    assert read_predictions(str(preds)) == {"p1": ["ABC transporter"], "p2": ["kinase"]}

    assert main([str(manual), str(preds), "--skip-header"]) == 0
    out = capsys.readouterr().out
    assert "TP: 2" in out and "precision: 100.00%" in out
