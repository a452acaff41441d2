from __future__ import annotations
import argparse
import math
import threading
from flask import Flask, request, jsonify, Response
from consensus.engine import Engine
from consensus.models import Description, DescriptionBatch
from consensus.options import add_settings_arguments, settings_from_args

import consensus_web

app = Flask(__name__)
_engine: Engine | None = None
# TextMapping and the per-query results are engine state
_lock = threading.Lock()

MAX_K = 50


def _parse_batch(payload) -> tuple[DescriptionBatch, int | None]:
    """Validate a summarize request; raises ValueError with a client-facing message."""
    if not isinstance(payload, dict):
        raise ValueError("expected a JSON object")
    query = payload.get("query", "")
    if not isinstance(query, str):
        raise ValueError("'query' must be a string")
    items = payload.get("descriptions")
    if not isinstance(items, list) or not items:
        raise ValueError("'descriptions' must be a non-empty list")
    batch = DescriptionBatch(query)
    for i, item in enumerate(items):
        if isinstance(item, str):
            batch.add(Description(item, 1.0, query))
            continue
        if not isinstance(item, dict) or not isinstance(item.get("description"), str):
            raise ValueError(f"descriptions[{i}] needs a 'description' string")
        weight = item.get("weight", 1.0)
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise ValueError(f"descriptions[{i}].weight must be a number")
        if not math.isfinite(weight):
            raise ValueError(f"descriptions[{i}].weight must be finite")
        batch.add(Description(item["description"], float(weight), query))
    k = payload.get("k")
    if k is not None and (isinstance(k, bool) or not isinstance(k, int) or not 1 <= k <= MAX_K):
        raise ValueError(f"'k' must be an integer within 1..{MAX_K}")
    return batch, k


# ---------- API ----------
@app.get("/health")
def health():
    return jsonify({"ok": True, "background": bool(_engine and _engine.has_background)})


@app.post("/api/summarize")
def api_summarize():
    if _engine is None:
        return jsonify({"error": "engine not initialized"}), 503
    try:
        batch, k = _parse_batch(request.get_json(silent=True))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    with _lock:
        rows = _engine.summarize(batch, max_results=k)
    return jsonify([
        {"query": batch.name, "score": r.score, "description": r.text}
        for r in rows
    ])


# ---------- UI ----------
@app.get("/")
def home():
    # One textarea, one description per line; optional "score<TAB>description".
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Consensus description</title>
<style>
body{margin:0; background:#0b0f14; color:#cfd8e3; font:16px/1.45 system-ui,-apple-system,Segoe UI,Roboto,Arial}
.container{max-width:860px; margin:24px auto; padding:0 16px}
textarea,input{width:100%; background:#0b1117; color:#cfd8e3; border:1px solid #1c2530; border-radius:10px; padding:10px}
textarea{height:240px; font-family:ui-monospace,Menlo,Consolas,monospace}
.btn{margin-top:10px; padding:10px 14px; border-radius:10px; border:1px solid #1c2530; background:#0b1117; color:#cfd8e3; cursor:pointer}
.row{padding:8px 0; border-top:1px solid #1c2530}
.err{color:#ffb0b0}
</style>
</head>
<body>
  <div class="container">
    <h1>Consensus description</h1>
    <input id="query" placeholder="Query id" />
    <p>Hit descriptions, one per line (optionally <code>score&lt;TAB&gt;description</code>):</p>
    <textarea id="hits"></textarea>
    <button id="go" class="btn">Summarize</button>
    <div id="out"></div>
  </div>
<script>
const $ = (sel) => document.querySelector(sel);
function parseHits(text){
  return text.split("\n").filter(l => l.trim()).map(l => {
    const parts = l.split("\t");
    if(parts.length > 1 && !isNaN(parseFloat(parts[0]))){
      return {weight: parseFloat(parts[0]), description: parts.slice(1).join(" ")};
    }
    return {description: l, weight: 1};
  });
}
$("#go").addEventListener("click", async () => {
  const out = $("#out");
  out.innerHTML = "";
  try{
    const resp = await fetch("/api/summarize", {
      method: "POST",
      headers: {"Content-Type": "application/json"},
      body: JSON.stringify({query: $("#query").value, descriptions: parseHits($("#hits").value)}),
    });
    const data = await resp.json();
    if(!resp.ok) throw new Error(data.error || `HTTP ${resp.status}`);
    for(const r of data){
      const row = document.createElement("div");
      row.className = "row";
      row.textContent = `${r.score}\t${r.description}`;
      out.appendChild(row);
    }
  }catch(e){
    out.innerHTML = `<div class="err"></div>`;
    out.firstChild.textContent = `Error: ${e.message ?? e}`;
  }
});
</script>
</body>
</html>
"""
    return Response(html, mimetype="text/html")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run Flask UI on top of Engine")
    ap.add_argument("--background", default=None, help="Background file or folder")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    add_settings_arguments(ap)
    args = ap.parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ValueError as e:
        ap.error(str(e))

    global _engine
    _engine = consensus_web.initialize(args.background, settings, verbose=args.verbose)
    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _engine.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
