from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional


ENCODING = "utf-8"

# n-gram sizes considered as candidate phrases
MIN_NGRAM: int = 2
MAX_NGRAM: int = 10

# minimal foreground count before a phrase can be reported
MIN_COUNT_NGRAM: int = 2

# table entries below this count are pruned after each training pass
MIN_COUNT_OCCURRENCE: int = 2

# hard cap on phrases returned per n by the scoring engine
MAX_RETURNED_RESULTS: int = 25

# output filtering
OUTPUT_CUTOFF: int = 0
PRINT_NR: int = 1

# input weight handling: percent of the best weight a hit must reach (0 = off)
INPUT_PERCENT: int = 0
NORMALIZATION: bool = True

# text handling
LOWERCASE: bool = True
STEMMING: bool = True
UNIFY_UNKNOWNS: bool = True
SWITCH_ORDER: bool = False

# lines starting with this token are headers
HEADER_TOKEN = "querylocus"

# label used for generic descriptions and for queries without any result
UNKNOWN_LABEL = "conserved unknown protein"

# force a gc pass every N queries in long batch runs
GC_EVERY: int = 25


@dataclass
class Settings:
    """
    Run configuration consumed by the engine.

    Every field defaults to the module constant of the same meaning, so
    ``Settings()`` is the stock configuration. Call ``validate()`` once at
    startup; the core assumes a validated instance.

    Columns are 0-based indices into tab-delimited input lines. Either
    ``col_score`` or ``col_evalue`` may be set, never both.
    """
    min_ngram: int = MIN_NGRAM
    max_ngram: int = MAX_NGRAM
    min_count_ngram: int = MIN_COUNT_NGRAM
    min_occurrence: int = MIN_COUNT_OCCURRENCE
    max_returned: int = MAX_RETURNED_RESULTS
    output_cutoff: int = OUTPUT_CUTOFF
    print_nr: int = PRINT_NR
    input_percent: int = INPUT_PERCENT
    normalization: bool = NORMALIZATION
    lowercase: bool = LOWERCASE
    stemming: bool = STEMMING
    unify_unknowns: bool = UNIFY_UNKNOWNS
    switch_order: bool = SWITCH_ORDER
    col_desc: int = 0
    col_query: Optional[int] = None
    col_score: Optional[int] = None
    col_evalue: Optional[int] = None
    encoding: str = ENCODING
    verbose: bool = False

    def validate(self) -> "Settings":
        if self.min_ngram < 1:
            raise ValueError(f"min_ngram must be >= 1 (got {self.min_ngram})")
        if self.max_ngram < self.min_ngram:
            raise ValueError(f"max_ngram ({self.max_ngram}) must be >= min_ngram ({self.min_ngram})")
        if self.min_count_ngram < 1:
            raise ValueError("min_count_ngram must be >= 1")
        if self.min_occurrence < 1:
            raise ValueError("min_occurrence must be >= 1")
        if self.max_returned < 1:
            raise ValueError("max_returned must be >= 1")
        if not 1 <= self.print_nr <= self.max_returned:
            raise ValueError(f"print_nr must be within 1..{self.max_returned} (got {self.print_nr})")
        if self.output_cutoff < 0:
            raise ValueError("output_cutoff must be >= 0")
        if not 0 <= self.input_percent <= 100:
            raise ValueError("input_percent must be within 0..100")
        if self.col_score is not None and self.col_evalue is not None:
            raise ValueError("use either col_score or col_evalue, not both")
        for name in ("col_desc", "col_query", "col_score", "col_evalue"):
            v = getattr(self, name)
            if v is not None and v < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.col_query is not None and self.col_query == self.col_desc:
            raise ValueError("col_desc and col_query must differ")
        return self

    @property
    def weight_cutoff_enabled(self) -> bool:
        return 0 < self.input_percent <= 100

    def with_columns(self, **cols) -> "Settings":
        """Copy with other column positions (background/directory readers)."""
        return replace(self, **cols)
