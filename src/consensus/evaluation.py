"""
Evaluation of predicted descriptions against manual (gold) annotations.

Manual annotation files hold ``id<TAB>annotation[<TAB>annotation...]`` lines;
prediction files are the runner's own ``id<TAB>score<TAB>description``
output. For every query in the gold standard, the first prediction is
compared with the first manual annotation (and with the next ones as long
as the cleaned comparison finds them different).

Outcome classes:
    TP  prediction equals the annotation, possibly after cleaning
    TN  both sides are "undefined" (hypothetical, uncharacterized, ...)
    FN  an undefined prediction for an annotated query
    FP  shorter, longer or different predictions, plus functions invented
        for queries whose gold annotation is undefined
"""

from __future__ import annotations
import argparse
import enum
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import ENCODING

log = logging.getLogger(__name__)

UNDEFINED_EXACT = frozenset({
    "hypothetical protein",
    "uncharacterized protein",
    "predicted protein",
    "conserved unknown protein",
    "conserved hypothetical protein",
    "unnamed protein product",
})
UNDEFINED_PREFIXES = ("hypothetical protein", "uncharacterized protein")

CLEAN_PREFIXES = ("uncharacterized", "predicted:", "predicted", "probable", "putative")
CLEAN_SUFFIXES = (", putative", "(iss)", "protein", "homolog",
                  "isoform x1", "isoform x2", "isoform x3", "isoform", "-like")


class Comparison(enum.Enum):
    EQUAL = "equal"
    SHORTER = "shorter"
    LONGER = "longer"
    DIFFERENT = "different"


def is_undefined(text: str) -> bool:
    """True for descriptions that state no function ("hypothetical protein XP_123" too)."""
    low = text.lower().strip()
    if low in UNDEFINED_EXACT:
        return True
    # "hypothetical protein <identifier>"
    return low.startswith(UNDEFINED_PREFIXES) and len(text.split()) == 3


def clean_annotation(text: str) -> str:
    """Lowercase and strip uninformative prefixes and suffixes until nothing changes."""
    result = text.lower().strip()
    while True:
        before = result
        for prefix in CLEAN_PREFIXES:
            if result.startswith(prefix):
                result = result[len(prefix):].strip()
        for suffix in CLEAN_SUFFIXES:
            if result.endswith(suffix):
                result = result[:-len(suffix)].strip()
        if result == before:
            return result


def _relaxed(text: str) -> str:
    return text.replace("-", " ").replace(",", "")


def compare(gold: str, prediction: str) -> Comparison:
    """
    SHORTER: the prediction is contained in the gold annotation.
    LONGER: the gold annotation is contained in the prediction.
    Hyphens count as spaces and commas are ignored when the plain
    comparison fails.
    """
    if gold == prediction:
        return Comparison.EQUAL
    if prediction in gold:
        return Comparison.SHORTER
    gold, prediction = _relaxed(gold), _relaxed(prediction)
    if gold == prediction:
        return Comparison.EQUAL
    if prediction in gold:
        return Comparison.SHORTER
    if gold in prediction:
        return Comparison.LONGER
    return Comparison.DIFFERENT


def _pct(part: int, whole: int) -> float:
    return 100.0 * part / whole if whole else 0.0


@dataclass
class Report:
    tp: int = 0
    tn: int = 0
    fn: int = 0
    shorter: int = 0
    longer: int = 0
    different: int = 0
    invented: int = 0
    next_manual_consulted: int = 0
    skipped: int = 0
    equal_affixes: Counter = field(default_factory=Counter)
    shorters: Counter = field(default_factory=Counter)
    longers: Counter = field(default_factory=Counter)
    differences: Counter = field(default_factory=Counter)

    @property
    def fp(self) -> int:
        return self.invented + self.different + self.shorter + self.longer

    @property
    def total(self) -> int:
        return self.tp + self.tn + self.fn + self.fp

    @property
    def gold_negatives(self) -> int:
        return self.tn + self.invented

    @property
    def gold_positives(self) -> int:
        return self.total - self.gold_negatives

    @property
    def predicted_positives(self) -> int:
        return self.tp + self.fp

    @property
    def predicted_negatives(self) -> int:
        return self.tn + self.fn

    @property
    def precision(self) -> float:
        return _pct(self.tp, self.predicted_positives)

    @property
    def recall(self) -> float:
        return _pct(self.tp, self.gold_positives)

    @property
    def f_score(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if p + r else 0.0

    @property
    def specificity(self) -> float:
        return _pct(self.tn, self.gold_negatives)

    def lines(self) -> List[str]:
        out = [
            "Performance",
            f"  Predicted positives: {self.predicted_positives}",
            f"  Predicted negatives: {self.predicted_negatives}",
            f"  Gold positives: {self.gold_positives}",
            f"  Gold negatives: {self.gold_negatives}",
            f"  TP: {self.tp}",
            f"  FP: {self.fp} ({self.shorter} shorter, {self.longer} longer, "
            f"{self.different} different, {self.invented} invented)",
            f"  FN: {self.fn}",
            f"  TN: {self.tn}",
            f"  precision: {self.precision:.2f}%",
            f"  recall: {self.recall:.2f}%",
            f"  F-score: {self.f_score:.2f}%",
            f"  specificity: {self.specificity:.2f}%",
        ]
        for title, counts in (("Equal except for affixes (manual <-> predicted)", self.equal_affixes),
                              ("Shorter (manual -> predicted)", self.shorters),
                              ("Longer (manual <- predicted)", self.longers),
                              ("Different (manual <-> predicted)", self.differences)):
            if counts:
                out.append(title)
                out.extend(f"  {pair}: {n} cases" for pair, n in counts.most_common())
        return out


def evaluate(manuals: Dict[str, List[str]], predictions: Dict[str, List[str]]) -> Report:
    """Score predictions against the gold standard; only gold queries are considered."""
    report = Report()
    for query in sorted(manuals):
        golds = manuals[query]
        preds = predictions.get(query)
        if not golds or not preds:
            log.warning("query %s: missing gold annotation or prediction", query)
            report.skipped += 1
            continue
        prediction = preds[0]
        clean_pred = clean_annotation(prediction)

        gold = golds[0]
        result = compare(gold, prediction)
        clean_result = compare(clean_annotation(gold), clean_pred)
        for i, other in enumerate(golds[1:]):
            if clean_result is not Comparison.DIFFERENT:
                break
            if i == 0:
                report.next_manual_consulted += 1
            gold = other
            result = compare(gold, prediction)
            clean_result = compare(clean_annotation(gold), clean_pred)

        gold_undefined, pred_undefined = is_undefined(gold), is_undefined(prediction)
        if gold_undefined and pred_undefined:
            report.tn += 1
        elif pred_undefined:
            report.fn += 1
        elif gold_undefined:
            report.invented += 1
        elif result is Comparison.EQUAL:
            report.tp += 1
        elif clean_result is Comparison.EQUAL:
            report.tp += 1
            report.equal_affixes[f"{gold} <-> {prediction}"] += 1
        elif clean_result is Comparison.SHORTER:
            report.shorter += 1
            report.shorters[f"{gold} -> {prediction}"] += 1
        elif clean_result is Comparison.LONGER:
            report.longer += 1
            report.longers[f"{gold} <- {prediction}"] += 1
        else:
            report.different += 1
            report.differences[f"{gold} <-> {prediction}"] += 1
    return report


def read_manual_annotations(path: str, skip_header: bool = False,
                            encoding: str = ENCODING) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    with open(path, "r", encoding=encoding) as f:
        if skip_header:
            next(f, None)
        for line in f:
            fields = [c for c in line.rstrip("\r\n").split("\t") if c]
            if len(fields) < 2:
                continue
            out.setdefault(fields[0], []).extend(fields[1:])
    return out


def read_predictions(path: str, encoding: str = ENCODING) -> Dict[str, List[str]]:
    """``id<TAB>score<TAB>description`` records, best first per id as written."""
    out: Dict[str, List[str]] = {}
    with open(path, "r", encoding=encoding) as f:
        for line_no, line in enumerate(f, 1):
            fields = line.rstrip("\r\n").split("\t")
            if len(fields) < 3:
                if line.strip():
                    log.warning("%s:%d skipped: expected 3 columns", path, line_no)
                continue
            out.setdefault(fields[0], []).append(fields[2])
    return out


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Evaluate predicted descriptions against manual annotations")
    p.add_argument("manual", help="Manual annotations (id<TAB>annotation...)")
    p.add_argument("predictions", help="Predictions (id<TAB>score<TAB>description)")
    p.add_argument("--skip-header", action="store_true")
    args = p.parse_args(argv)

    manuals = read_manual_annotations(args.manual, args.skip_header)
    predictions = read_predictions(args.predictions)
    print(f"Evaluating {len(predictions)} predictions against {len(manuals)} manual annotations")
    for line in evaluate(manuals, predictions).lines():
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
