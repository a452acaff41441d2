from pathlib import Path
import pytest
import consensus_web
from consensus.models import Description, DescriptionBatch
from consensus_web.web import app as flask_app


def test_health_reports_background(tmp_path: Path, monkeypatch):
    import consensus_web.web as webmod
    client = flask_app.test_client()

    monkeypatch.setattr(webmod, "_engine", None)
    assert client.get("/health").get_json() == {"ok": True, "background": False}

    bg = tmp_path / "bg.txt"
    bg.write_text("kinase domain protein\n" * 3, encoding="utf-8")
    eng = consensus_web.initialize(str(bg))
    monkeypatch.setattr(webmod, "_engine", eng)
    assert client.get("/health").get_json() == {"ok": True, "background": True}
    eng.shutdown()


def test_module_level_summarize(monkeypatch):
    monkeypatch.setattr(consensus_web, "_engine", None)
    with pytest.raises(RuntimeError):
        consensus_web.summarize(DescriptionBatch("Q"))
    consensus_web.initialize()
    rows = consensus_web.summarize(DescriptionBatch("Q", [Description("ABC transporter")] * 2))
    assert rows[0].text == "ABC transporter"


def test_home_page_renders():
    rv = flask_app.test_client().get("/")
    assert rv.status_code == 200
    html = rv.get_data(as_text=True)
    assert "Consensus description" in html
    assert "/api/summarize" in html
