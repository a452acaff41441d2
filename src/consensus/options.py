"""argparse flags shared by the command line runner and the web server."""
from __future__ import annotations
import argparse

from . import config as CFG
from .config import Settings


def add_settings_arguments(p: argparse.ArgumentParser) -> None:
    g = p.add_argument_group("columns (0-based)")
    g.add_argument("--col-desc", type=int, default=0, help="Description column")
    g.add_argument("--col-query", type=int, default=None, help="Query id column")
    w = g.add_mutually_exclusive_group()
    w.add_argument("--col-score", type=int, default=None, help="Raw score column")
    w.add_argument("--col-evalue", type=int, default=None, help="E-value column")

    m = p.add_argument_group("model")
    m.add_argument("--min-ngram", type=int, default=CFG.MIN_NGRAM)
    m.add_argument("--max-ngram", type=int, default=CFG.MAX_NGRAM)
    m.add_argument("--min-count-ngram", type=int, default=CFG.MIN_COUNT_NGRAM,
                   help="Minimal foreground count of a reported phrase")
    m.add_argument("--min-occurrence", type=int, default=CFG.MIN_COUNT_OCCURRENCE,
                   help="Pruning threshold of the n-gram tables")
    m.add_argument("--max-returned", type=int, default=CFG.MAX_RETURNED_RESULTS,
                   help="Phrases kept per n-gram size")
    m.add_argument("--switch-order", action="store_true",
                   help="Treat phrases as bags of words")

    t = p.add_argument_group("text")
    t.add_argument("--no-lowercase", dest="lowercase", action="store_false")
    t.add_argument("--no-stemming", dest="stemming", action="store_false")
    t.add_argument("--no-unify", dest="unify_unknowns", action="store_false",
                   help="Keep generic descriptions as they are")
    t.add_argument("--encoding", default=CFG.ENCODING)

    o = p.add_argument_group("weights and output")
    o.add_argument("--input-percent", type=int, default=CFG.INPUT_PERCENT,
                   help="Drop hits below this percentage of the best weight (0 = off)")
    o.add_argument("--no-normalization", dest="normalization", action="store_false")
    o.add_argument("--output-cutoff", type=int, default=CFG.OUTPUT_CUTOFF,
                   help="Minimal score of a reported phrase")
    o.add_argument("--print-nr", type=int, default=CFG.PRINT_NR,
                   help="Results per query")
    p.add_argument("--verbose", action="store_true")


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings(
        min_ngram=args.min_ngram,
        max_ngram=args.max_ngram,
        min_count_ngram=args.min_count_ngram,
        min_occurrence=args.min_occurrence,
        max_returned=args.max_returned,
        output_cutoff=args.output_cutoff,
        print_nr=args.print_nr,
        input_percent=args.input_percent,
        normalization=args.normalization,
        lowercase=args.lowercase,
        stemming=args.stemming,
        unify_unknowns=args.unify_unknowns,
        switch_order=args.switch_order,
        col_desc=args.col_desc,
        col_query=args.col_query,
        col_score=args.col_score,
        col_evalue=args.col_evalue,
        encoding=args.encoding,
        verbose=args.verbose,
    ).validate()
