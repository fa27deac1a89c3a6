# src/comment_sentiment/cli.py
"""
Command line front end.

    comment-sentiment analyze comments.csv                 # list columns
    comment-sentiment analyze comments.csv --column text --backend vader \
        --insight --out-dir outputs/
"""
from __future__ import annotations
import argparse, dataclasses, functools, logging, os, sys
from typing import List, Optional, Tuple

from .config import BACKENDS, Settings, load_settings
from .metrics import template_insight
from .pipeline import AnalysisSession, ClassifyFn, Stage, SummarizeFn
from . import viz

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="comment-sentiment",
                                description="Sentiment analysis for social-media comment CSVs.")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    a = sub.add_parser("analyze", help="classify the comments in one CSV column")
    a.add_argument("csv", help="input CSV with a header row")
    a.add_argument("--column", help="column holding the comment text (omit to list columns)")
    a.add_argument("--backend", choices=BACKENDS, help="classifier backend (default from SENTIMENT_BACKEND)")
    a.add_argument("--model", help="chat model for the openai backend")
    a.add_argument("--batch-size", type=int, help="comments per classifier request")
    a.add_argument("--insight", action="store_true", help="also generate a summary paragraph")
    a.add_argument("--out-dir", help="write charts and results.csv here")
    a.add_argument("--table-limit", type=int, help="rows to print in the results table")
    return p


def _backends(settings: Settings) -> Tuple[ClassifyFn, SummarizeFn]:
    if settings.backend == "vader":
        from .sentiment import vader_classify_batch
        return vader_classify_batch, template_insight
    from . import openai_llm
    kw = {"model": settings.model, "api_key": settings.openai_api_key}
    return (functools.partial(openai_llm.classify_batch, **kw),
            functools.partial(openai_llm.summarize_insight, **kw))


def _print_progress(done: int, total: int, label: str) -> None:
    pct = min(100.0, done / total * 100) if total else 100.0
    print(f"\rAnalyzing sentiments... {pct:3.0f}% ({done}/{total}, {label})",
          end="", file=sys.stderr, flush=True)


def run_analyze(args: argparse.Namespace, settings: Settings) -> int:
    session = AnalysisSession(batch_size=args.batch_size or settings.batch_size)
    if session.load_csv(args.csv) is Stage.ERROR:
        print(f"error: {session.state.error}", file=sys.stderr)
        return 1

    if not args.column:
        print("Select the column that contains the comments:")
        for h in session.state.headers:
            print(f"  {h}")
        return 2
    try:
        session.select_column(args.column)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    classify_fn, summarize_fn = _backends(settings)
    stage = session.run(classify_fn, progress_callback=_print_progress)
    print(file=sys.stderr)
    if stage is Stage.ERROR:
        print(f"error: {session.state.error}", file=sys.stderr)
        return 1

    stats = session.stats()
    print("Analysis Complete")
    for k, v in stats.as_dict().items():
        print(f"  {k:<9} {v:>8,}")

    limit = args.table_limit if args.table_limit is not None else settings.table_limit
    print()
    print(session.table(limit=limit).to_string(index=False, max_colwidth=60))

    if args.insight:
        print()
        print("Insight:")
        print(session.insight(summarize_fn))

    if args.out_dir:
        out = args.out_dir
        viz.plot_stat_tiles(stats, out_path=os.path.join(out, "stats.png"))
        viz.plot_sentiment_distribution(stats, out_path=os.path.join(out, "sentiment_distribution.png"))
        viz.plot_results_table(session.state.analyzed, out_path=os.path.join(out, "top_comments.png"))
        viz.export_results_table(session.state.analyzed, os.path.join(out, "results.csv"))
        log.info("wrote dashboard files to %s", out)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    if args.backend:
        settings = dataclasses.replace(settings, backend=args.backend)
    if args.model:
        settings = dataclasses.replace(settings, model=args.model)
    if args.batch_size is not None and args.batch_size < 1:
        print("error: --batch-size must be >= 1", file=sys.stderr)
        return 2
    if args.table_limit is not None and args.table_limit < 1:
        print("error: --table-limit must be >= 1", file=sys.stderr)
        return 2
    return run_analyze(args, settings)


if __name__ == "__main__":
    sys.exit(main())
