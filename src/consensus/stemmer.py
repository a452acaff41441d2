"""Basic suffix stemmer used when canonicalizing descriptions.

A lightweight stemmer without external NLP dependencies. It only has to be
consistent: the same word always maps to the same stem, so "kinases" and
"kinase" are counted together. Case is preserved (lowercasing is a separate
canonicalization step), and tokens containing digits are left alone so that
identifiers like "P450" or "HSP70s" are not mangled.
"""

from typing import Callable

# (suffix, minimum word length, replacement), longer suffixes first
_RULES = (
    ("ational", 9, "ate"),
    ("ization", 9, "ize"),
    ("fulness", 9, "ful"),
    ("iveness", 9, "ive"),
    ("tion", 7, ""),
    ("ment", 7, ""),
    ("ness", 7, ""),
    ("ible", 7, ""),
    ("able", 7, ""),
    ("ing", 6, ""),
    ("ies", 5, "y"),
    ("ed", 5, ""),
    ("ly", 5, ""),
    ("es", 5, ""),
    ("s", 4, ""),
)

Stemmer = Callable[[str], str]


def stem_token(word: str) -> str:
    """Strip one common English suffix from ``word``.

    Minimum-length guards keep short words such as "gene" or "sing" intact.
    Words ending in "ss", "us" or "is" (e.g. "class", "virus", "synthesis")
    are not treated as plurals.

    Args:
        word: A single token.

    Returns:
        The stemmed token, with the original casing of the kept part.
    """
    if any(ch.isdigit() for ch in word):
        return word
    lower = word.lower()
    for suffix, min_len, replacement in _RULES:
        if len(lower) < min_len or not lower.endswith(suffix):
            continue
        if suffix == "s" and lower.endswith(("ss", "us", "is")):
            return word
        if suffix == "ed" and lower.endswith("eed"):
            return word
        if suffix == "es" and not lower.endswith(("sses", "xes", "ches", "shes", "zes")):
            # plain plural ("enzymes"): only drop the s
            return word[:-1]
        return word[: len(word) - len(suffix)] + replacement
    return word
