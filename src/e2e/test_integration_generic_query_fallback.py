from pathlib import Path
import pytest
from consensus.config import Settings
from consensus.engine import Engine
from consensus.models import Description, DescriptionBatch


def _seed(tmp: Path) -> str:
    hits = tmp / "hits.txt"
    hits.write_text("Q2\tunknown protein\n" * 3 + "Q3\tABC transporter\n" * 2, encoding="utf-8")
    return str(hits)


@pytest.mark.e2e
def test_generic_only_query_gets_the_unknown_label(tmp_path: Path):
    out = tmp_path / "results.txt"
    eng = Engine(Settings(col_query=0, col_desc=1))
    try:
        assert eng.run_file(_seed(tmp_path), str(out)) == 2
    finally:
        eng.shutdown()
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Q2\t1\tconserved unknown protein"
    assert lines[1] == "Q3\t2\tABC transporter"


def test_fallback_score_follows_the_cutoff():
    eng = Engine(Settings(output_cutoff=3))
    rows = eng.summarize(DescriptionBatch("Q", [Description("unknown protein")] * 3))
    assert [(r.score, r.text) for r in rows] == [(4, "conserved unknown protein")]


def test_every_query_yields_a_line():
    eng = Engine()
    assert len(eng.summarize(DescriptionBatch("empty"))) == 1
    assert len(eng.summarize(DescriptionBatch("bad", [Description("x y", -1)]))) == 1


def test_generic_descriptions_kept_when_unification_is_off():
    eng = Engine(Settings(unify_unknowns=False))
    rows = eng.summarize(DescriptionBatch("Q", [Description("unknown protein")] * 3))
    assert [(r.score, r.text) for r in rows] == [(3, "unknown protein")]
