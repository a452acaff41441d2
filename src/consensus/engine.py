# consensus/engine.py
from __future__ import annotations

import gc
import logging
import os
from typing import Iterable, List, Optional

from . import config as CFG
from .config import Settings
from .loader import iter_query_batches, read_background, read_batch
from .models import Description, DescriptionBatch, ScoredPhrase
from .normalize import TextMapping
from .output import ResultWriter, format_results
from .overrep import BackgroundModel, Overrepresentation
from .preprocess import preprocess, unify_spelling
from .weights import enforce_weight_cutoff, linear_normalization

log = logging.getLogger(__name__)

PREDICTION_PREFIX = "prediction_"


class Engine:
    """
    Thin orchestration layer that glues together:
      - preprocessing and canonicalization (preprocess, TextMapping),
      - weight handling (weights),
      - the background model and per-query scoring (overrep),
      - result formatting and writing (output).

    Public API (used by CLI/Flask):
      * build_background(path):  read a background corpus and train on it
      * summarize(batch):        best description(s) for one query batch
      * run_file(testfile, out): every query of a concatenated file
      * run_directory(dir, out): one query per file in a directory
      * shutdown():              drop all model state
    """

    # ------------- lifecycle -------------

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = (settings or Settings()).validate()
        s = self.settings
        if s.verbose:
            logging.basicConfig(level=logging.INFO)
            os.environ["CONSENSUS_VERBOSE"] = "1"
        self.mapping = TextMapping(lowercase=s.lowercase, stemming=s.stemming,
                                   unify_unknowns=s.unify_unknowns)
        self.background = BackgroundModel(s.min_ngram, s.max_ngram, s.min_occurrence)
        self.overrep = Overrepresentation.from_settings(s, self.background)
        self._queries = 0

    # ------------- background -------------

    def build_background(self, path: str) -> None:
        """Train the background model on a file or a directory of files."""
        log.info("Building background from %s", path)
        self.train_background(read_background(path, self.settings))

    def train_background(self, batches: Iterable[DescriptionBatch]) -> None:
        batches = list(batches)
        for batch in batches:
            for d in batch:
                d.description = self.background_text(d.description)
        self.overrep.calculate_background_model(batches)
        log.info("Background ready: %d descriptions", sum(len(b) for b in batches))

    def background_text(self, raw: str) -> str:
        """Canonical training text of a background description (nothing is registered)."""
        return " ".join(self.mapping.tokens(preprocess(raw)))

    def clear_background(self) -> None:
        self.overrep.clean_background_model()

    @property
    def has_background(self) -> bool:
        return bool(self.background)

    # ------------- query -------------

    def prepare(self, batch: DescriptionBatch) -> DescriptionBatch:
        """
        Copy of ``batch`` ready for scoring: preprocessed, weight-filtered and
        canonicalized, with every original and sub-phrase registered in the
        mapping. Descriptions with a negative weight are left out.
        """
        s = self.settings
        work = batch.copy_empty()
        for d in batch:
            if not d.is_valid:
                continue
            text = preprocess(d.description)
            if text:
                work.add(Description(text, d.weight, d.query))
        unify_spelling(work)
        if s.weight_cutoff_enabled:
            work = enforce_weight_cutoff(work, s.input_percent)
        if s.normalization:
            work = linear_normalization(work)
        for d in work:
            d.description = self.mapping.convert(d.description, True, s.switch_order)
        return work

    def summarize(self, batch: DescriptionBatch,
                  max_results: Optional[int] = None) -> List[ScoredPhrase]:
        """Best description(s) for one query; never empty. max_results overrides print_nr."""
        s = self.settings
        self._queries += 1
        if self._queries % CFG.GC_EVERY == 0:
            log.info("Cleaning up memory after %d queries", self._queries)
            gc.collect()

        self.mapping.clean()
        self.overrep.clean_results()
        log.info("Calculating batch for query %s (%d descriptions)", batch.name, len(batch))
        prepared = self.prepare(batch)
        ok = self.overrep.calculate(prepared, s.switch_order)
        ranked = self.overrep.results if ok else {}
        try:
            return format_results(ranked, self.mapping, s.output_cutoff,
                                  max_results or s.print_nr)
        finally:
            self.overrep.clean_results()
            self.mapping.clean()

    def run_file(self, testfile: str, outputfile: Optional[str] = None) -> int:
        """Summarize every query of a concatenated file; returns the number of queries."""
        count = 0
        with ResultWriter(outputfile, encoding=self.settings.encoding) as writer:
            for batch in iter_query_batches(testfile, self.settings):
                writer.write(batch.name, self.summarize(batch))
                count += 1
        log.info("Done: %d queries from %s", count, testfile)
        return count

    def run_directory(self, testdir: str, outputdir: str) -> int:
        """
        Summarize each file of ``testdir`` as one query. Results go to
        ``outputdir/prediction_<file name>``; unreadable files are skipped.
        """
        os.makedirs(outputdir, exist_ok=True)
        count = 0
        for fn in sorted(os.listdir(testdir)):
            path = os.path.join(testdir, fn)
            if not os.path.isfile(path):
                continue
            try:
                batch = read_batch(path, self.settings)
            except OSError as e:
                log.warning("Could not read %s: %s", path, e)
                continue
            out = os.path.join(outputdir, PREDICTION_PREFIX + fn)
            with ResultWriter(out, encoding=self.settings.encoding) as writer:
                writer.write(batch.name, self.summarize(batch))
            count += 1
        log.info("Done: %d files from %s", count, testdir)
        return count

    # ------------- teardown -------------

    def shutdown(self) -> None:
        try:
            self.overrep.clean_results()
            self.mapping.clean()
        finally:
            self.clear_background()
            log.info("Engine shutdown complete")
