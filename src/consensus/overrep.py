# consensus/overrep.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from . import config as CFG
from .config import Settings
from .errors import ModelTrainingFailure
from .lm import LanguageModel, score_frequency, score_overrepresentation
from .models import DescriptionBatch, RankedResults

log = logging.getLogger(__name__)


def sorted_windows(line: str, n: int) -> List[str]:
    """
    Order-insensitive training units: every window of n tokens, with its
    distinct tokens sorted alphabetically ("b a c" -> "a b c" for n = 3).
    A window is returned once per line, in order of first appearance.
    """
    toks = line.split()
    windows = (" ".join(sorted(set(toks[i:i + n]))) for i in range(0, len(toks) - n + 1))
    return list(dict.fromkeys(windows))


def _training_weight(weight: float) -> int:
    try:
        return int(weight)
    except (TypeError, ValueError, OverflowError) as e:
        raise ModelTrainingFailure(f"malformed training weight: {weight!r}") from e


class BackgroundModel:
    """
    One reference LanguageModel per phrase length, built once and then only
    read while queries are scored. Owned explicitly by whoever runs the
    queries and handed to each Overrepresentation that needs it.
    """

    def __init__(self,
                 min_ngram: int = CFG.MIN_NGRAM,
                 max_ngram: int = CFG.MAX_NGRAM,
                 min_occurrence: int = CFG.MIN_COUNT_OCCURRENCE) -> None:
        self.min_ngram = min_ngram
        self.max_ngram = max_ngram
        self.min_occurrence = min_occurrence
        self._models: Dict[int, LanguageModel] = {}

    def get(self, n: int) -> Optional[LanguageModel]:
        return self._models.get(n)

    def train(self, batches: Iterable[DescriptionBatch]) -> None:
        """Train (or extend) the model of every length over all valid descriptions."""
        batches = list(batches)
        for n in range(self.min_ngram, self.max_ngram + 1):
            model = self._models.get(n)
            if model is None:
                model = LanguageModel(n, self.min_occurrence)
                self._models[n] = model
            model.train_all(
                (d.description, _training_weight(d.weight))
                for batch in batches for d in batch if d.is_valid
            )
            log.info("background model n=%d: %d entries", n, len(model))

    def clear(self) -> None:
        self._models = {}

    def __bool__(self) -> bool:
        return bool(self._models)

    def __len__(self) -> int:
        return len(self._models)


class Overrepresentation:
    """
    Scores one query batch at a time across all configured phrase lengths
    and merges the per-length results into one ranked map.

    Ranked map keys are sign-flipped scores, so ascending key order is
    descending significance; only strictly positive raw scores are kept.
    """

    def __init__(self,
                 min_ngram: int = CFG.MIN_NGRAM,
                 max_ngram: int = CFG.MAX_NGRAM,
                 min_count_ngram: int = CFG.MIN_COUNT_NGRAM,
                 min_occurrence: int = CFG.MIN_COUNT_OCCURRENCE,
                 max_returned: int = CFG.MAX_RETURNED_RESULTS,
                 background: Optional[BackgroundModel] = None) -> None:
        self.min_ngram = min_ngram
        self.max_ngram = max_ngram
        self.min_count_ngram = min_count_ngram
        self.min_occurrence = min_occurrence
        self.max_returned = max_returned
        self.background = background if background is not None else \
            BackgroundModel(min_ngram, max_ngram, min_occurrence)
        self._results: RankedResults = {}

    @classmethod
    def from_settings(cls, settings: Settings,
                      background: Optional[BackgroundModel] = None) -> "Overrepresentation":
        return cls(
            min_ngram=settings.min_ngram,
            max_ngram=settings.max_ngram,
            min_count_ngram=settings.min_count_ngram,
            min_occurrence=settings.min_occurrence,
            max_returned=settings.max_returned,
            background=background,
        )

    # ------------- background -------------

    def calculate_background_model(self, batches: Iterable[DescriptionBatch]) -> None:
        self.background.train(batches)

    def clean_background_model(self) -> None:
        self.background.clear()

    # ------------- per query -------------

    @property
    def results(self) -> RankedResults:
        return self._results

    def clean_results(self) -> None:
        self._results = {}

    def calculate(self, batch: DescriptionBatch, switch_order: bool = False) -> bool:
        """
        Score ``batch`` for every phrase length from max_ngram down to
        min_ngram. Returns False, with empty results, when a foreground model
        could not be trained.
        """
        self._results = {}
        ranked: RankedResults = {}
        try:
            for n in range(self.max_ngram, self.min_ngram - 1, -1):
                foreground = LanguageModel(n, self.min_occurrence)
                foreground.train_all(self._training_units(batch, n, switch_order))
                for score, tokens in self._score(foreground, n):
                    flipped = -score
                    if flipped < 0:
                        ranked.setdefault(flipped, set()).add(" ".join(tokens))
        except ModelTrainingFailure as e:
            log.warning("query %s: foreground training failed, no results (%s)", batch.name, e)
            return False
        self._results = ranked
        return True

    # ------------- internals -------------

    def _score(self, foreground: LanguageModel, n: int):
        background = self.background.get(n)
        if background is None:
            return score_frequency(foreground, n, self.max_returned)
        return score_overrepresentation(foreground, background, n,
                                        self.min_count_ngram, self.max_returned)

    @staticmethod
    def _training_units(batch: DescriptionBatch, n: int,
                        switch_order: bool) -> Iterator[Tuple[str, int]]:
        for d in batch:
            if not d.is_valid:
                continue
            weight = _training_weight(d.weight)
            if switch_order:
                for window in sorted_windows(d.description, n):
                    yield window, weight
            else:
                yield d.description, weight
