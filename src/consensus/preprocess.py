"""
Description preprocessing.

Raw hit descriptions carry a lot of layout noise: organism names in a
trailing ``[...]`` block, UniProt style ``RecName: Full=...`` records,
"predicted:" prefixes. This module removes that noise before the text is
canonicalized, and protects the ``+`` and ``-`` characters, which are part of
names like "ATP-dependent" or "Na+/K+ ATPase" and must not split words.

Key Functions:
    preprocess(line): full cleanup applied to every description
    to_meta(line) / from_meta(line): protect and restore + and -
    unify_spelling(batch): align "co expression"/"coexpression" with "co-expression"
"""

from __future__ import annotations
import re
from typing import Dict

from .models import DescriptionBatch

# sentinel words standing in for + and - while text is tokenized;
# lowercase so that case folding leaves them intact
PLUS_META = "qqplusqq"
HYPHEN_META = "qqhyphenqq"

START_STOP_WORDS = ("predicted:",)
REMOVE_WORDS = ("RecName:", "Full=", "Short=", "AltName:", "(ISS)")
RECNAME_CUTS = ("Short=", "AltName:", "Flags:")

_WS_RE = re.compile(r"\s+")


def remove_trailing_brackets(line: str) -> str:
    """Drop a trailing [...] block, e.g. "kinase [Homo sapiens]" -> "kinase"."""
    s = line.strip()
    idx = s.rfind("[")
    if idx > 0 and s.endswith("]"):
        s = s[:idx]
    return s.strip()


def remove_stop_words(line: str) -> str:
    """
    Strip uninformative prefixes and record markup.

    Repeats until nothing changes: a leading "predicted:" may hide another
    one, and a RecName record is cut before its Short=/AltName:/Flags: parts.
    """
    s = line
    changed = True
    while changed:
        changed = False
        for word in START_STOP_WORDS:
            if s.lower().startswith(word):
                s = s[len(word):].lstrip()
                changed = True
        if "RecName" in s:
            cut = min((s.find(m) for m in RECNAME_CUTS if s.find(m) > 0), default=-1)
            if cut > 0:
                s = s[:cut]
        for word in REMOVE_WORDS:
            if word in s:
                s = s.replace(word, "").strip()
                changed = True
    return s.strip()


def to_meta(line: str) -> str:
    return line.replace("+", PLUS_META).replace("-", HYPHEN_META)


def from_meta(line: str) -> str:
    return line.replace(PLUS_META, "+").replace(HYPHEN_META, "-")


def preprocess(line: str) -> str:
    """Full cleanup of one raw description (brackets, stop words, meta)."""
    s = remove_trailing_brackets(line)
    s = remove_stop_words(s)
    s = to_meta(s)
    return _WS_RE.sub(" ", s).strip()


def _hyphenated_words(text: str):
    for word in text.split():
        while word.startswith(HYPHEN_META):
            word = word[len(HYPHEN_META):]
        while word.endswith(HYPHEN_META):
            word = word[:-len(HYPHEN_META)]
        if HYPHEN_META in word:
            yield word


def unify_spelling(batch: DescriptionBatch) -> Dict[str, str]:
    """
    Rewrite spelling variants of hyphenated words within one batch.

    Descriptions must already be in meta form. For every hyphenated word seen
    in the batch, its spaced ("co expression") and concatenated
    ("coexpression") variants are replaced by the hyphenated one in all
    descriptions of the batch. Returns the applied conversions.
    """
    conversions: Dict[str, str] = {}
    for d in batch:
        for word in _hyphenated_words(d.description):
            conversions[word.replace(HYPHEN_META, " ")] = word
            conversions[word.replace(HYPHEN_META, "")] = word
    if not conversions:
        return conversions
    # longest variants first so "coexpression" is not eaten by a shorter key
    ordered = sorted(conversions, key=len, reverse=True)
    pattern = re.compile(r"(?<!\w)(" + "|".join(re.escape(k) for k in ordered) + r")(?!\w)")
    for d in batch:
        d.description = pattern.sub(lambda m: conversions[m.group(1)], d.description)
    return conversions
