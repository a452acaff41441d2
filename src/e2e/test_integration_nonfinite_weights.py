from pathlib import Path
import pytest
from consensus.config import Settings
from consensus.engine import Engine


def _seed(tmp: Path) -> str:
    f = tmp / "hits.txt"
    f.write_text(
        "Q1\tinf\tkinase domain protein\n"
        "Q1\t5\tkinase domain protein\n"
        "Q1\t5\tkinase domain protein\n"
        "Q2\t1e999\tABC transporter\n"
        "Q2\t3\tABC transporter\n"
        "Q2\t3\tABC transporter\n",
        encoding="utf-8",
    )
    return str(f)


@pytest.mark.e2e
def test_infinite_scores_cost_one_record_not_the_run(tmp_path: Path, caplog):
    out = tmp_path / "out.txt"
    eng = Engine(Settings(col_query=0, col_score=1, col_desc=2))
    try:
        assert eng.run_file(_seed(tmp_path), str(out)) == 2
    finally:
        eng.shutdown()
    assert out.read_text(encoding="utf-8").splitlines() == [
        "Q1\t2\tkinase domain protein",
        "Q2\t2\tABC transporter",
    ]
    assert "hits.txt:1 skipped" in caplog.text
    assert "hits.txt:4 skipped" in caplog.text
