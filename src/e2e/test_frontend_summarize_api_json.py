from pathlib import Path
import pytest
from consensus.engine import Engine
from consensus_web.web import app as flask_app


def _seed(tmp: Path) -> str:
    bg = tmp / "bg.txt"
    bg.write_text("hypothetical protein\n" * 100 + "kinase domain protein\n" * 2, encoding="utf-8")
    return str(bg)


@pytest.mark.e2e
def test_frontend_summarize_api_json(tmp_path: Path, monkeypatch):
    eng = Engine()
    eng.build_background(_seed(tmp_path))

    import consensus_web.web as webmod
    monkeypatch.setattr(webmod, "_engine", eng)

    client = flask_app.test_client()
    payload = {
        "query": "Q1",
        "descriptions": [{"description": "kinase domain protein", "weight": 10}] * 6
                        + ["hypothetical protein"],
        "k": 2,
    }
    rv = client.post("/api/summarize", json=payload)
    assert rv.status_code == 200
    data = rv.get_json()
    assert isinstance(data, list) and 1 <= len(data) <= 2
    first = data[0]
    for key in ("query", "score", "description"):
        assert key in first
    assert first["query"] == "Q1"
    assert first["description"] == "kinase domain protein"
    assert isinstance(first["score"], (int, float))

    eng.shutdown()


@pytest.mark.parametrize("payload", [
    None,
    [],
    {"query": "Q"},
    {"query": "Q", "descriptions": []},
    {"query": 3, "descriptions": ["a b"]},
    {"query": "Q", "descriptions": [{"weight": 1}]},
    {"query": "Q", "descriptions": [{"description": "a b", "weight": "high"}]},
    {"query": "Q", "descriptions": [{"description": "a b", "weight": float("inf")}]},
    {"query": "Q", "descriptions": ["a b"], "k": 0},
])
def test_frontend_rejects_bad_payloads(payload, monkeypatch):
    import consensus_web.web as webmod
    monkeypatch.setattr(webmod, "_engine", Engine())
    rv = flask_app.test_client().post("/api/summarize", json=payload)
    assert rv.status_code == 400
    assert "error" in rv.get_json()


def test_frontend_without_engine(monkeypatch):
    import consensus_web.web as webmod
    monkeypatch.setattr(webmod, "_engine", None)
    rv = flask_app.test_client().post("/api/summarize", json={"descriptions": ["a b"]})
    assert rv.status_code == 503
