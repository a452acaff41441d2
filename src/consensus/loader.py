from __future__ import annotations
import logging
import math
import os
import random
import re
from itertools import groupby
from typing import Iterable, Iterator, List, Optional

from .config import HEADER_TOKEN, Settings
from .errors import InvalidColumnIndex, MalformedWeight
from .models import Description, DescriptionBatch

log = logging.getLogger(__name__)

# Progress logging (set CONSENSUS_VERBOSE=1 to enable)
VERBOSE = os.environ.get("CONSENSUS_VERBOSE") == "1"
PROGRESS_EVERY_QUERIES = 1_000
PROGRESS_EVERY_LINES = 100_000

DEFAULT_WEIGHT = 1.0
# score given to an e-value of exactly 0
ZERO_EVALUE_SCORE = 250.0

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def _column(fields: List[str], col: int) -> str:
    if col >= len(fields):
        raise InvalidColumnIndex(col, len(fields))
    return fields[col]


def _as_float(raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError:
        raise MalformedWeight(raw) from None
    if not math.isfinite(value):
        raise MalformedWeight(raw)
    return value


def evalue_to_score(evalue: float) -> float:
    """
    Order-of-magnitude score of an e-value: 0 -> 250, otherwise one plus the
    number of times the value must be multiplied by 10 to reach 1.
    1e-5 -> 6, 0.5 -> 2, 3 -> 1.
    """
    if evalue < 0:
        raise MalformedWeight(evalue)
    if evalue == 0:
        return ZERO_EVALUE_SCORE
    if evalue >= 1:
        return DEFAULT_WEIGHT
    # tolerance keeps exact powers of ten (1e-5) from gaining a step
    steps = math.ceil(-math.log10(evalue) - 1e-9)
    return DEFAULT_WEIGHT + max(0, steps)


def parse_line(line: str, settings: Settings) -> Description:
    """
    Read one tab-delimited record. Columns are 0-based and set in
    ``settings``; raises InvalidColumnIndex or MalformedWeight for a bad
    record. The description is returned as read (no preprocessing).
    """
    fields = line.rstrip("\r\n").split("\t")
    text = _column(fields, settings.col_desc)
    query = _column(fields, settings.col_query).strip() if settings.col_query is not None else None
    weight = DEFAULT_WEIGHT
    if settings.col_score is not None:
        weight = _as_float(_column(fields, settings.col_score))
    elif settings.col_evalue is not None:
        weight = evalue_to_score(_as_float(_column(fields, settings.col_evalue)))
    return Description(text, weight, query)


def _is_header(line: str) -> bool:
    return line.lower().startswith(HEADER_TOKEN)


def _iter_records(path: str, settings: Settings) -> Iterator[Description]:
    """Valid records of a file; bad ones are skipped with a warning."""
    with open(path, "r", encoding=settings.encoding, errors="replace") as f:
        for line_no, raw in enumerate(f, 1):
            if not raw.strip() or _is_header(raw):
                continue
            try:
                yield parse_line(raw, settings)
            except (InvalidColumnIndex, MalformedWeight) as e:
                log.warning("%s:%d skipped: %s", path, line_no, e)
            if VERBOSE and line_no % PROGRESS_EVERY_LINES == 0:
                print(f"[read] {os.path.basename(path)} lines={line_no:,}")


def iter_query_batches(path: str, settings: Settings) -> Iterator[DescriptionBatch]:
    """
    One batch per run of consecutive records sharing a query id.

    A query that reappears later in the file starts a new batch.
    """
    count = 0
    for query, records in groupby(_iter_records(path, settings), key=lambda d: d.query):
        yield DescriptionBatch(query, list(records))
        count += 1
        if VERBOSE and count % PROGRESS_EVERY_QUERIES == 0:
            print(f"[read] queries={count:,}")


def read_batch(path: str, settings: Settings, name: Optional[str] = None) -> DescriptionBatch:
    """All valid records of one file as a single batch (named after the file by default)."""
    if name is None:
        name = os.path.splitext(os.path.basename(path))[0]
    return DescriptionBatch(name, list(_iter_records(path, settings)))


def read_batch_dir(path: str, settings: Settings) -> Iterator[DescriptionBatch]:
    """One batch per regular file in ``path``, in file name order. Unreadable files are skipped."""
    for fn in sorted(os.listdir(path)):
        full = os.path.join(path, fn)
        if not os.path.isfile(full):
            continue
        try:
            yield read_batch(full, settings)
        except OSError as e:
            log.warning("could not read %s: %s", full, e)


def read_background(path: str, settings: Settings) -> List[DescriptionBatch]:
    """
    Background corpus from a single file or a directory of files. The
    description is the first column and every record weighs 1.
    """
    desc_only = settings.with_columns(col_desc=0, col_query=None, col_score=None, col_evalue=None)
    if os.path.isdir(path):
        batches = list(read_batch_dir(path, desc_only))
    else:
        batches = [read_batch(path, desc_only)]
    log.info("background: %d files, %d descriptions", len(batches), sum(len(b) for b in batches))
    return batches


def _clean_dump_line(line: str) -> str:
    # keep the last tab-separated field, without control characters
    fields = [f for f in line.rstrip("\r\n").split("\t") if f]
    return _CONTROL_RE.sub("", fields[-1]) if fields else ""


def _write_lines(dst: str, lines: Iterable[str], encoding: str) -> int:
    parent = os.path.dirname(os.path.abspath(dst))
    os.makedirs(parent, exist_ok=True)
    written = 0
    with open(dst, "w", encoding=encoding) as out:
        for line in lines:
            out.write(line + "\n")
            written += 1
    return written


def sample_background(src: str, dst: str, fraction: float,
                      seed: Optional[int] = None, encoding: str = "utf-8") -> int:
    """
    Write a random sample of about ``fraction`` of the lines of a background
    dump to ``dst``, keeping only the description (last) column. Returns the
    number of lines written.
    """
    if not 0 < fraction <= 1:
        raise ValueError(f"fraction must be within (0, 1] (got {fraction})")
    rng = random.Random(seed)

    def sampled() -> Iterator[str]:
        with open(src, "r", encoding=encoding, errors="replace") as f:
            for raw in f:
                if rng.random() < fraction:
                    yield _clean_dump_line(raw)

    written = _write_lines(dst, sampled(), encoding)
    log.info("sampled %d lines from %s into %s", written, src, dst)
    return written


def head_background(src: str, dst: str, rows: int, encoding: str = "utf-8") -> int:
    """Like sample_background, but keeps the first ``rows`` lines."""
    def first() -> Iterator[str]:
        with open(src, "r", encoding=encoding, errors="replace") as f:
            for i, raw in enumerate(f):
                if i >= rows:
                    break
                yield _clean_dump_line(raw)

    return _write_lines(dst, first(), encoding)
