"""
Result formatting and writing.

Ranked canonical phrases are turned back into readable text here: each
phrase is resolved to its best original string, layout artifacts are
stripped, and at most ``max_results`` phrases per query are kept. Every
query yields at least one result; when nothing survives, a synthetic
"conserved unknown protein" line scored just above the cutoff is emitted.
"""

from __future__ import annotations
import logging
import os
import sys
from typing import IO, Iterable, List, Optional

from .config import ENCODING, UNKNOWN_LABEL
from .errors import MissingCanonicalMapping
from .models import RankedResults, ScoredPhrase
from .normalize import TextMapping
from .preprocess import from_meta

log = logging.getLogger(__name__)

BRACE_PAIRS = (("(", ")"), ("{", "}"), ("[", "]"))
EDGE_PUNCTUATION = ",;.:-"

# surviving texts shorter than this are fragments, not descriptions
MIN_TEXT_LENGTH = 3


def _drop_open_tail(text: str, open_ch: str, close_ch: str) -> str:
    open_at = text.rfind(open_ch)
    if open_at >= 0 and open_at > text.rfind(close_ch):
        return text[:open_at].strip()
    return text


def _drop_close_head(text: str, open_ch: str, close_ch: str) -> str:
    open_at = text.find(open_ch)
    if open_at < 0:
        open_at = len(text)
    close_at = text.find(close_ch)
    if 0 <= close_at < open_at:
        return text[close_at + 1:].strip()
    return text


def _until_stable(text: str, step) -> str:
    while True:
        before = text
        for open_ch, close_ch in BRACE_PAIRS:
            text = step(text, open_ch, close_ch)
        if text == before:
            return text


def remove_unmatched_braces(text: str) -> str:
    """
    Drop a trailing part opened by an unmatched (, { or [ and a leading part
    closed by an unmatched ), } or ]. Repeated until nothing changes.

    >>> remove_unmatched_braces("kinase (putative")
    'kinase'
    >>> remove_unmatched_braces("domain) transporter")
    'transporter'
    """
    text = _until_stable(text, _drop_open_tail)
    return _until_stable(text, _drop_close_head)


def remove_punctuation(text: str) -> str:
    """Strip , ; . : and - from both ends, repeatedly."""
    while True:
        before = text
        if text[:1] and text[0] in EDGE_PUNCTUATION:
            text = text[1:].strip()
        if text[-1:] and text[-1] in EDGE_PUNCTUATION:
            text = text[:-1].strip()
        if text == before:
            return text


def is_strange_punctuation(text: str) -> bool:
    """A comma or semicolon within the first three characters marks a mangled fragment."""
    for ch in ",;":
        idx = text.find(ch)
        if -1 < idx < 3:
            return True
    return False


def format_score(score: float) -> str:
    if float(score).is_integer():
        return str(int(score))
    return f"{score:.4f}".rstrip("0").rstrip(".")


def clean_original(original: str) -> Optional[str]:
    """Presentable form of a resolved original, or None when it must be dropped."""
    text = from_meta(remove_unmatched_braces(original))
    if len(text) < MIN_TEXT_LENGTH:
        return None
    text = remove_punctuation(text)
    if not text or is_strange_punctuation(text):
        return None
    if text.lower() == UNKNOWN_LABEL:
        # only ever reported as the fallback below
        return None
    return text


def format_results(ranked: RankedResults,
                   mapping: TextMapping,
                   min_score_cutoff: float,
                   max_results: int) -> List[ScoredPhrase]:
    """
    Best results first, as readable text.

    ``ranked`` maps sign-flipped scores to canonical phrases. Scores below
    ``min_score_cutoff`` are skipped. Within a tie, longer phrases come
    first, then alphabetical order. Phrases without a registered original
    are skipped with a warning.
    """
    out: List[ScoredPhrase] = []
    for key in sorted(ranked):
        if len(out) >= max_results:
            break
        score = -key
        if score < min_score_cutoff:
            continue
        for phrase in sorted(ranked[key], key=_tie_order):
            if len(out) >= max_results:
                break
            try:
                original = _resolve(mapping, phrase)
            except MissingCanonicalMapping as e:
                log.warning("%s", e)
                continue
            text = clean_original(original)
            if text is not None:
                out.append(ScoredPhrase(score, text))
    if not out:
        out.append(ScoredPhrase(min_score_cutoff + 1, UNKNOWN_LABEL))
    return out


def _tie_order(phrase: str):
    return -len(phrase.split()), phrase


def _resolve(mapping: TextMapping, phrase: str) -> str:
    original = mapping.retrieve_original(phrase)
    if original is None:
        raise MissingCanonicalMapping(phrase)
    return original


class ResultWriter:
    """
    Writes ``query \\t score \\t description`` records to a file or stdout.

    Use as a context manager. With ``append=False`` an existing file is
    overwritten (a warning is logged); parent directories are created.
    """

    def __init__(self, path: Optional[str] = None, append: bool = False,
                 encoding: str = ENCODING) -> None:
        self.path = path
        self.append = append
        self.encoding = encoding
        self._fh: Optional[IO[str]] = None

    def __enter__(self) -> "ResultWriter":
        if self.path is None:
            self._fh = sys.stdout
            return self
        parent = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(parent, exist_ok=True)
        if not self.append and os.path.exists(self.path):
            log.warning("overwriting existing output file %s", self.path)
        self._fh = open(self.path, "a" if self.append else "w", encoding=self.encoding)
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def write(self, query: Optional[str], results: Iterable[ScoredPhrase]) -> int:
        if self._fh is None:
            raise RuntimeError("ResultWriter is not open")
        written = 0
        for r in results:
            self._fh.write(f"{query}\t{format_score(r.score)}\t{r.text}\n")
            written += 1
        self._fh.flush()
        return written

    def close(self) -> None:
        if self._fh is not None and self._fh is not sys.stdout:
            self._fh.close()
        self._fh = None
