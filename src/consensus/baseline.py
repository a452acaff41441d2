"""Best-hit baseline: the top hit's description is the prediction."""
from __future__ import annotations
import argparse
import logging
from itertools import groupby
from typing import Iterator, List, Optional, Tuple

from .config import ENCODING
from .evaluation import is_undefined
from .output import format_score

log = logging.getLogger(__name__)

FALLBACK_SCORE = 1.0
FALLBACK_LABEL = "hypothetical protein"


def clean_hit(text: str) -> str:
    """Remove the last [...] block (organism name) from a hit description."""
    open_at, close_at = text.rfind("["), text.rfind("]")
    if 0 <= open_at < close_at:
        text = text[:open_at] + text[close_at + 1:]
    return text.strip()


def _read_hits(path: str, encoding: str) -> Iterator[Tuple[str, float, str]]:
    # query <TAB> hit id <TAB> weight <TAB> description
    with open(path, "r", encoding=encoding) as f:
        for line_no, line in enumerate(f, 1):
            fields = line.rstrip("\r\n").split("\t")
            try:
                yield fields[0].strip(), float(fields[2]), clean_hit(fields[3])
            except (IndexError, ValueError):
                if line.strip():
                    log.warning("%s:%d skipped: not a query/id/weight/description record", path, line_no)


def best_hit(hits: List[Tuple[str, float, str]],
             avoid_hypothetical: bool) -> Tuple[float, str]:
    for _, weight, description in hits:
        if not avoid_hypothetical or not is_undefined(description):
            return weight, description
    return FALLBACK_SCORE, FALLBACK_LABEL


def best_hit_baseline(src: str, dst: str, avoid_hypothetical: bool = False,
                      encoding: str = ENCODING) -> int:
    """
    Predict the first hit of every query (optionally the first one that is
    not hypothetical). Queries with no usable hit get "hypothetical protein".
    Returns the number of queries written.
    """
    count = 0
    with open(dst, "w", encoding=encoding) as out:
        for query, group in groupby(_read_hits(src, encoding), key=lambda h: h[0]):
            weight, description = best_hit(list(group), avoid_hypothetical)
            out.write(f"{query}\t{format_score(weight)}\t{description}\n")
            count += 1
    log.info("baseline: %d queries written to %s", count, dst)
    return count


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Best-hit baseline predictions")
    p.add_argument("hits", help="query<TAB>id<TAB>weight<TAB>description lines, best hit first")
    p.add_argument("output")
    p.add_argument("--avoid-hypothetical", action="store_true",
                   help="Skip hits without a defined function")
    args = p.parse_args(argv)
    best_hit_baseline(args.hits, args.output, args.avoid_hypothetical)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
