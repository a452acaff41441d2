"""Public API for the consensus web surface."""
from __future__ import annotations
import time
from consensus.config import Settings
from consensus.engine import Engine
from consensus.models import DescriptionBatch, ScoredPhrase

_engine: Engine | None = None


def initialize(background: str | None = None,
               settings: Settings | None = None,
               verbose: bool = False) -> Engine:
    """Create the shared engine, optionally trained on a background corpus."""
    global _engine
    t0 = time.perf_counter()
    eng = Engine(settings)
    if background:
        if verbose:
            print(f"[build] background: {background}")
        eng.build_background(background)
    _engine = eng
    if verbose:
        print(f"[ready] init complete in {time.perf_counter() - t0:.2f}s")
    return eng


def summarize(batch: DescriptionBatch) -> list[ScoredPhrase]:
    """Best description(s) for one batch."""
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call initialize(...) first.")
    return _engine.summarize(batch)
