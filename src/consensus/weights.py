from __future__ import annotations
import logging
import math

from .models import DescriptionBatch

log = logging.getLogger(__name__)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def enforce_weight_cutoff(batch: DescriptionBatch, percent: float) -> DescriptionBatch:
    """
    Keep only descriptions weighing at least ``percent`` % of the batch maximum.

    The caller decides whether the cutoff applies (0 < percent <= 100).
    Returns a new batch; the input batch is left untouched.
    """
    allowed = batch.max_weight() * percent / 100
    out = batch.copy_empty()
    for d in batch:
        if d.weight >= allowed:
            out.add(d)
    log.info("weight cutoff (%s%%): %d --> %d", percent, len(batch), len(out))
    return out


def linear_normalization(batch: DescriptionBatch) -> DescriptionBatch:
    """
    Rescale weights to small positive integers averaging about one.

    factor = count / total weight; every weight becomes round(weight * factor)
    (half up). Descriptions whose new weight is not positive are dropped.
    Weights are updated in place on the surviving descriptions, which are
    then collected into a new batch. A batch whose total weight is not a
    positive finite number normalizes to an empty batch.
    """
    out = batch.copy_empty()
    total = batch.total_weight()
    if not math.isfinite(total) or total <= 0:
        log.info("weights normalized: %d --> 0 (total weight %s)", len(batch), total)
        return out
    factor = len(batch) / total
    for d in batch:
        new_weight = _round_half_up(d.weight * factor)
        if new_weight > 0:
            d.weight = new_weight
            out.add(d)
    log.info("weights normalized: %d --> %d", len(batch), len(out))
    return out
