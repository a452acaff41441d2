"""
Weighted n-gram language models.

A LanguageModel of order n counts every k-gram (k = 1..n) of whitespace
separated tokens, each window weighted by the weight of the text it came
from. The order-n table holds the candidate phrases; the lower orders feed
the smoothed probability estimates used when the model serves as a
background (reference) distribution.

Probabilities are interpolated Witten-Bell estimates that back off to a
uniform "boundary" distribution over the vocabulary plus one slot for
unseen tokens, so every sequence, including never-seen ones, receives a
finite, non-zero probability.

Two scoring functions rank the phrases of a foreground model:

- score_overrepresentation: binomial z-score of the foreground count
  against the count expected under a background model.
- score_frequency: raw weighted count, used when no background exists.
"""

from __future__ import annotations
import math
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .errors import ModelTrainingFailure

Phrase = Tuple[str, ...]
Scored = Tuple[float, Phrase]

# keeps z-scores finite when a background probability rounds to 0 or 1
_EPS = 1e-12


class LanguageModel:
    """
    Weighted k-gram counts for k = 1..n with low-count pruning.

    Counts are integers: weights are training multiplicities. Per-order
    observation totals are kept separately and are not affected by pruning,
    so they always reflect the amount of text seen.
    """

    def __init__(self, n: int, min_occurrence: int = 2) -> None:
        if n < 1:
            raise ValueError("n-gram order must be >= 1")
        self.n = n
        self.min_occurrence = min_occurrence
        self._counts: Dict[Phrase, int] = defaultdict(int)
        self._totals: List[int] = [0] * (n + 1)
        self._vocab: Set[str] = set()
        # context -> (sum of continuation counts, distinct continuations)
        self._stats: Optional[Dict[Phrase, Tuple[int, int]]] = None

    # ------------- training -------------

    def train(self, text: str, weight: float = 1) -> None:
        """Add every window of ``text`` to the tables, ``weight`` times."""
        w = _as_count(weight)
        if w == 0:
            return
        toks = text.split()
        if not toks:
            return
        self._vocab.update(toks)
        counts = self._counts
        for k in range(1, min(self.n, len(toks)) + 1):
            for i in range(0, len(toks) - k + 1):
                counts[tuple(toks[i:i + k])] += w
                self._totals[k] += w
        self._stats = None

    def train_all(self, items: Iterable[Tuple[str, float]]) -> None:
        """One bulk training pass over (text, weight) pairs, then prune."""
        for text, weight in items:
            self.train(text, weight)
        self.prune()

    def prune(self, threshold: Optional[int] = None) -> int:
        """Evict entries counted fewer than ``threshold`` times; returns how many."""
        t = self.min_occurrence if threshold is None else threshold
        doomed = [key for key, c in self._counts.items() if c < t]
        for key in doomed:
            del self._counts[key]
        if doomed:
            self._stats = None
        return len(doomed)

    # ------------- lookups -------------

    def count(self, tokens: Iterable[str]) -> int:
        return self._counts.get(tuple(tokens), 0)

    def phrases(self, k: Optional[int] = None) -> Iterator[Tuple[Phrase, int]]:
        """Surviving (tokens, count) entries of order k (default: n)."""
        k = self.n if k is None else k
        for key, c in self._counts.items():
            if len(key) == k:
                yield key, c

    def total(self, k: Optional[int] = None) -> int:
        k = self.n if k is None else k
        return self._totals[k] if 0 < k <= self.n else 0

    @property
    def vocabulary_size(self) -> int:
        return len(self._vocab)

    def __len__(self) -> int:
        return len(self._counts)

    # ------------- probabilities -------------

    def probability(self, tokens: Iterable[str]) -> float:
        """Joint probability of a token sequence (chain rule, history < n)."""
        toks = tuple(tokens)
        if not toks:
            return 1.0
        log_p = 0.0
        for i, word in enumerate(toks):
            history = toks[max(0, i - self.n + 1):i]
            log_p += math.log(self._conditional(word, history))
        return math.exp(log_p)

    def _conditional(self, word: str, history: Phrase) -> float:
        stats = self._context_stats()
        if not history:
            uniform = 1.0 / (len(self._vocab) + 1)
            seen, types = stats.get((), (0, 0))
            if seen == 0:
                return uniform
            return (self._counts.get((word,), 0) + types * uniform) / (seen + types)
        lower = self._conditional(word, history[1:])
        seen, types = stats.get(history, (0, 0))
        if seen == 0:
            return lower
        return (self._counts.get(history + (word,), 0) + types * lower) / (seen + types)

    def _context_stats(self) -> Dict[Phrase, Tuple[int, int]]:
        if self._stats is None:
            seen: Dict[Phrase, int] = defaultdict(int)
            types: Dict[Phrase, int] = defaultdict(int)
            for key, c in self._counts.items():
                ctx = key[:-1]
                seen[ctx] += c
                types[ctx] += 1
            self._stats = {ctx: (seen[ctx], types[ctx]) for ctx in seen}
        return self._stats


def _as_count(weight: float) -> int:
    if isinstance(weight, float) and not (math.isfinite(weight) and weight.is_integer()):
        raise ModelTrainingFailure(f"training weight must be a whole number (got {weight!r})")
    try:
        w = int(weight)
    except (TypeError, ValueError, OverflowError) as e:
        raise ModelTrainingFailure(f"training weight is not a number: {weight!r}") from e
    if w < 0:
        raise ModelTrainingFailure(f"training weight must be >= 0 (got {w})")
    return w


def _top(scored: List[Scored], top_k: int) -> List[Scored]:
    # highest score first, ties in token order for stable output
    scored.sort(key=lambda st: (-st[0], st[1]))
    return scored[:top_k]


def score_overrepresentation(foreground: LanguageModel,
                             background: LanguageModel,
                             n: int,
                             min_count: int,
                             top_k: int) -> List[Scored]:
    """
    Rank foreground phrases of length n by how surprising their counts are
    under the background model.

    score = (c - N*p) / sqrt(N*p*(1-p)), with c the phrase's foreground count,
    N the number of length-n windows observed in the foreground and p the
    background probability of the phrase. Phrases counted fewer than
    ``min_count`` times are ignored. Returns at most ``top_k`` entries,
    highest first.
    """
    trials = foreground.total(n)
    if trials <= 0:
        return []
    scored: List[Scored] = []
    for toks, c in foreground.phrases(n):
        if c < min_count:
            continue
        p = min(max(background.probability(toks), _EPS), 1.0 - _EPS)
        expected = trials * p
        z = (c - expected) / math.sqrt(expected * (1.0 - p))
        scored.append((z, toks))
    return _top(scored, top_k)


def score_frequency(foreground: LanguageModel, n: int, top_k: int) -> List[Scored]:
    """Rank foreground phrases of length n by weighted count."""
    scored: List[Scored] = [(float(c), toks) for toks, c in foreground.phrases(n)]
    return _top(scored, top_k)
