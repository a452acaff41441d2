"""Exceptions raised by the consensus engine.

All record and query level errors are recoverable: readers skip the record,
the orchestrator gives up on the current query only.
"""
from __future__ import annotations


class ConsensusError(Exception):
    """Base class for engine errors."""


class InvalidColumnIndex(ConsensusError, IndexError):
    """A configured column does not exist in an input line."""

    def __init__(self, column: int, available: int) -> None:
        super().__init__(f"{column} is not a valid column (total columns: {available})")
        self.column = column
        self.available = available


class MalformedWeight(ConsensusError, ValueError):
    """A score or e-value field could not be read as a number."""

    def __init__(self, value: object) -> None:
        super().__init__(f"not a valid weight: {value!r}")
        self.value = value


class ModelTrainingFailure(ConsensusError, RuntimeError):
    """Training the foreground model failed; the current query is abandoned."""


class MissingCanonicalMapping(ConsensusError, KeyError):
    """A ranked phrase has no original text registered for it."""

    def __init__(self, phrase: str) -> None:
        super().__init__(phrase)
        self.phrase = phrase

    def __str__(self) -> str:
        return f"could not find a textual mapping for {self.phrase!r}"
