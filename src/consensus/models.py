# src/consensus/models.py
"""
Data models for the consensus engine.

This module defines small, focused data containers:

- Description: one free-text annotation with its weight and query.
- DescriptionBatch: a named group of descriptions scored together.
- ScoredPhrase: one formatted result line handed to the writer.

These classes do not contain business logic beyond trivial aggregates; they
only structure the data so that reading, modeling and formatting remain
simple and predictable.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set


@dataclass(slots=True)
class Description:
    """
    One textual annotation, usually the description of a similarity-search hit.

    Attributes
    ----------
    description : str
        The text. Rewritten in place by preprocessing and canonicalization,
        so after reading it holds the canonical token string.
    weight : float
        Hit score. Negative weights mark a description to be ignored.
    query : Optional[str]
        Identifier of the query the hit belongs to (None when unknown).
    """
    description: str
    weight: float = 1.0
    query: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.weight >= 0


@dataclass(slots=True)
class DescriptionBatch:
    """
    A named batch of descriptions. One batch holds everything scored for one
    query (or one background file). The name is not a unique identifier.
    """
    name: Optional[str]
    descriptions: List[Description] = field(default_factory=list)

    def add(self, d: Description) -> None:
        self.descriptions.append(d)

    def copy_empty(self) -> "DescriptionBatch":
        return DescriptionBatch(self.name)

    def max_weight(self) -> float:
        return max((d.weight for d in self.descriptions), default=0.0)

    def total_weight(self) -> float:
        return sum(d.weight for d in self.descriptions)

    def __len__(self) -> int:
        return len(self.descriptions)

    def __iter__(self) -> Iterator[Description]:
        return iter(self.descriptions)

    def __str__(self) -> str:
        return f"DescriptionBatch {self.name}: {len(self.descriptions)} descriptions"


@dataclass(frozen=True, slots=True)
class ScoredPhrase:
    """
    One result for a query, ready for output.

    Attributes
    ----------
    score : float
        Overrepresentation (or frequency) score, higher is more significant.
    text : str
        Human-readable description recovered from the canonical phrase.
    """
    score: float
    text: str


# flipped score -> phrases sharing that score; ascending keys = best first
RankedResults = Dict[float, Set[str]]
