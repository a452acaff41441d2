"""Public API for the consensus description miner."""
from __future__ import annotations

from .config import Settings
from .engine import Engine
from .models import Description, DescriptionBatch, ScoredPhrase

__all__ = ["Engine", "Settings", "Description", "DescriptionBatch", "ScoredPhrase"]
