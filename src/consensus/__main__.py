from __future__ import annotations
import argparse
from consensus.engine import Engine
from consensus.options import add_settings_arguments, settings_from_args


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Consensus description miner (Engine-backed)")
    g = p.add_mutually_exclusive_group(required=True)
    g.add_argument("--testfile", default=None, help="Tab-delimited hits of many queries")
    g.add_argument("--testdir", default=None, help="Folder with one file of hits per query")

    p.add_argument("--background", default=None, help="Background file or folder")
    p.add_argument("--outputfile", default=None, help="Results file (default: stdout)")
    p.add_argument("--outputdir", default=None, help="Results folder (required with --testdir)")
    p.add_argument("--weights", action="store_true",
                   help="--testdir files hold 'score<TAB>description' lines")
    add_settings_arguments(p)

    args = p.parse_args(argv)
    if args.testdir and not args.outputdir:
        p.error("--testdir requires --outputdir")
    if args.testdir and args.weights:
        args.col_score, args.col_desc = 0, 1
    if args.testfile and args.col_query is None:
        p.error("--testfile requires --col-query")
    try:
        settings = settings_from_args(args)
    except ValueError as e:
        p.error(str(e))

    eng = Engine(settings)
    try:
        if args.background:
            eng.build_background(args.background)
        if args.testfile:
            eng.run_file(args.testfile, args.outputfile)
        else:
            eng.run_directory(args.testdir, args.outputdir)
        return 0
    finally:
        eng.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
