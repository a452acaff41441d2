from __future__ import annotations
import re
from typing import Dict, List, Optional

from .config import UNKNOWN_LABEL
from .stemmer import Stemmer, stem_token

# characters that split words; "+" and "-" are informative and are protected
# by preprocess.to_meta() before they get here
WORD_DELIMITERS = ".,;:/|[]{}()?!'&*= \t"

# allowed inside a word only ("word_ word" and "_word" lose it)
INTERMEDIATE_PUNCTUATION = "_"

# never allowed at the end of a sub-phrase
END_REMOVALS = set(".,;:/-|_[{(+?!'&*= \t")

# never allowed at the start of a sub-phrase (opening brackets are kept)
START_REMOVALS = set(".,;:/-|_+?!'&*= \t")

_DELIM_CLASS = re.escape(WORD_DELIMITERS)
_SPLIT_RE = re.compile(f"[{_DELIM_CLASS}]+")
# a word with the delimiters that follow it, or a leading run of delimiters
_PIECE_RE = re.compile(f"[{_DELIM_CLASS}]+|[^{_DELIM_CLASS}]+[{_DELIM_CLASS}]*")
_INTER_CLASS = re.escape(INTERMEDIATE_PUNCTUATION)
# intermediate punctuation at a line edge or next to a delimiter
_LOOSE_INTER_RE = re.compile(
    f"(?:^|(?<=[{_DELIM_CLASS}\\s]))[{_INTER_CLASS}]+|[{_INTER_CLASS}]+(?=[{_DELIM_CLASS}\\s]|$)"
)

GENERIC_EXACT = frozenset({
    "protein",
    "unknown",
    "unknown protein",
    "unnamed protein",
    "family protein",
    "unnamed protein product",
})
GENERIC_CONTAINS = ("hypothetical protein", "predicted protein", "conserved unknown protein")


def is_generic(text: str) -> bool:
    """True for descriptions that carry no functional information."""
    low = text.lower().strip()
    return low in GENERIC_EXACT or any(marker in low for marker in GENERIC_CONTAINS)


def unify_generic(text: str) -> str:
    """Map generic descriptions onto one shared label, leave the rest untouched."""
    return UNKNOWN_LABEL if is_generic(text) else text


def fold_intermediate(line: str) -> str:
    """
    Drop "_" runs that touch a line edge or a word delimiter, so
    "word_ word", "_word" and "word_(x)" tokenize like their sub-phrases.
    """
    return _LOOSE_INTER_RE.sub("", line)


def split_words(line: str) -> List[str]:
    return [t for t in _SPLIT_RE.split(line) if t]


def strip_edges(text: str) -> str:
    """Remove delimiter-class characters from both ends of a candidate phrase."""
    text = text.strip()
    end = len(text)
    while end > 0 and text[end - 1] in END_REMOVALS:
        end -= 1
    start = 0
    while start < end and text[start] in START_REMOVALS:
        start += 1
    return text[start:end]


def _bracket_balanced(s: str, open_ch: str, close_ch: str) -> bool:
    return s.count(open_ch) == s.count(close_ch)


def _wrapped(s: str, open_ch: str, close_ch: str) -> bool:
    return s.startswith(open_ch) and s.endswith(close_ch)


def choose(first: str, second: str) -> str:
    """
    Pick the better of two originals that share a canonical form.

    Precedence:
      1) not all uppercase over all uppercase
      2) not all lowercase over all lowercase
      3) balanced () over unbalanced, unless wrapped in one redundant pair
      4) same for []
      5) the shorter string
      6) the lexicographically smaller string
    The result does not depend on argument order.
    """
    if first == second:
        return first

    first_upper, second_upper = first.upper() == first, second.upper() == second
    if first_upper != second_upper:
        return second if first_upper else first

    first_lower, second_lower = first.lower() == first, second.lower() == second
    if first_lower != second_lower:
        return second if first_lower else first

    for open_ch, close_ch in (("(", ")"), ("[", "]")):
        first_ok = _bracket_balanced(first, open_ch, close_ch)
        second_ok = _bracket_balanced(second, open_ch, close_ch)
        if first_ok and not second_ok and not _wrapped(first, open_ch, close_ch):
            return first
        if second_ok and not first_ok and not _wrapped(second, open_ch, close_ch):
            return second

    if len(first) != len(second):
        return first if len(first) < len(second) else second
    return min(first, second)


class TextMapping:
    """
    Canonicalizes descriptions and remembers, per canonical form, the best
    original string to show a user.

    The mapping is query-scoped: call clean() between independent queries.
    """

    def __init__(self,
                 lowercase: bool = True,
                 stemming: bool = True,
                 unify_unknowns: bool = True,
                 remove_end_punctuation: bool = True,
                 stemmer: Stemmer = stem_token) -> None:
        self.lowercase = lowercase
        self.stemming = stemming
        self.unify_unknowns = unify_unknowns
        self.remove_end_punctuation = remove_end_punctuation
        self.stemmer = stemmer
        self._origmap: Dict[str, str] = {}

    def clean(self) -> None:
        self._origmap = {}

    def retrieve_original(self, converted: str) -> Optional[str]:
        return self._origmap.get(converted)

    def __len__(self) -> int:
        return len(self._origmap)

    def tokens(self, line: str) -> List[str]:
        """Canonical tokens of a line, in their original order."""
        out: List[str] = []
        for tok in split_words(fold_intermediate(line)):
            if self.stemming:
                tok = self.stemmer(tok)
            if self.lowercase:
                tok = tok.lower()
            out.append(tok)
        return out

    def convert(self, line: str, expand_subphrases: bool = False, allow_reordering: bool = False) -> str:
        """
        Canonicalize ``line`` and register it.

        Returns the canonical tokens in original order (the text the models
        train on). The registered key is the sorted, de-duplicated token bag
        when ``allow_reordering`` is set, so "signaling enzyme" and
        "enzyme signaling" share one entry. With ``expand_subphrases`` every
        contiguous sub-phrase of the line is registered as well, which is what
        lets n-grams found by the models be mapped back to readable text.
        """
        toks = self.tokens(line)
        key = " ".join(sorted(set(toks))) if allow_reordering else " ".join(toks)
        self._add(line, key)
        if expand_subphrases:
            self._add_subphrases(line, allow_reordering)
        return " ".join(toks)

    # ------------- internals -------------

    def _add(self, line: str, key: str) -> None:
        if not key:
            return
        if self.unify_unknowns:
            line = unify_generic(line)
        current = self._origmap.get(key)
        self._origmap[key] = line if current is None else choose(current, line)

    def _add_subphrases(self, line: str, allow_reordering: bool) -> None:
        pieces = _PIECE_RE.findall(line)
        total = len(pieces)
        for size in range(1, total + 1):
            for start in range(0, total - size + 1):
                sub = "".join(pieces[start:start + size])
                sub = strip_edges(sub) if self.remove_end_punctuation else sub.strip()
                if sub:
                    self.convert(sub, False, allow_reordering)
