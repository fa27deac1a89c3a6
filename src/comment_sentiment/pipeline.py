# src/comment_sentiment/pipeline.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Callable, List, Optional, Sequence, Union

import pandas as pd

from .data_prep import cell_text, load_comments, prepare_comments
from .errors import (ClassificationFailure, NoValidComments, ParseFailure,
                     SentimentPipelineError, SummarizationFailure)
from .metrics import build_insight_corpus, compute_stats, results_table
from .models import SENTIMENT_LABELS, AnalyzedComment, Row, RunStats, SentimentResult

log = logging.getLogger(__name__)

ClassifyFn = Callable[[List[str]], Sequence[SentimentResult]]
SummarizeFn = Callable[[str], str]
ProgressFn = Callable[[int, int, str], None]   # (completed, total, label)

DEFAULT_BATCH_SIZE = 50
FALLBACK_INSIGHT = SummarizationFailure.user_message


class Stage(str, Enum):
    INITIAL = "initial"
    SELECTING_COLUMN = "selecting_column"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


STAGE_DESCRIPTIONS = {
    Stage.INITIAL: "Begin by uploading your comment data.",
    Stage.SELECTING_COLUMN: "Prepare your data for analysis.",
    Stage.PROCESSING: "Please wait while we analyze your data.",
    Stage.DONE: "Review your sentiment analysis results.",
    Stage.ERROR: "Something went wrong. Please try again.",
}


@dataclass
class RunState:
    """Everything one run accumulates. Only AnalysisSession mutates it."""
    stage: Stage = Stage.INITIAL
    rows: List[Row] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    selected_column: str = ""
    analyzed: List[AnalyzedComment] = field(default_factory=list)
    progress: float = 0.0
    error: str = ""
    failure: Optional[SentimentPipelineError] = None


def repair_results(results: Sequence[SentimentResult], n: int) -> List[SentimentResult]:
    """Pad with neutral / truncate so there is exactly one result per input."""
    out = list(results[:n])
    if len(results) != n:
        log.warning("classifier returned %d results for %d comments; %s",
                    len(results), n, "padding with neutral" if len(results) < n else "truncating")
        out.extend(SentimentResult.neutral() for _ in range(n - len(out)))
    return out


def _checked(results: object) -> List[SentimentResult]:
    """Reject classifier output that is not a list of SentimentResult with a known label."""
    if not isinstance(results, (list, tuple)):
        raise ClassificationFailure(f"classifier returned {type(results).__name__}, expected a list")
    for i, r in enumerate(results):
        if not isinstance(r, SentimentResult) or r.sentiment not in SENTIMENT_LABELS:
            raise ClassificationFailure(f"classifier result {i} is not a valid SentimentResult: {r!r}")
    return list(results)


class AnalysisSession:
    """
    Drives one upload -> column -> classify -> results run.

        initial --load_csv--> selecting_column --run--> processing --> done
                     \\                                      \\-> error
                      \\-> error (parse failure)
        any stage --reset--> initial

    Batches go to the classifier one at a time, in order; the analyzed list
    only ever grows while a run is in progress.
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.batch_size = batch_size
        self.state = RunState()

    # ── transitions ──────────────────────────────────────────

    def reset(self) -> Stage:
        self.state = RunState()
        return self.state.stage

    def load_csv(self, source: Union[str, IO]) -> Stage:
        self._require(Stage.INITIAL)
        try:
            rows, headers = load_comments(source)
        except ParseFailure as e:
            log.error("csv parse failed: %s", e)
            return self._fail(e)
        return self.load_rows(rows, headers)

    def load_rows(self, rows: Sequence[Row], headers: Optional[Sequence[str]] = None) -> Stage:
        """Start from rows that were parsed elsewhere."""
        self._require(Stage.INITIAL)
        if headers is None:
            headers = list(dict.fromkeys(k for r in rows for k in r))
        self.state.rows = list(rows)
        self.state.headers = list(headers)
        self.state.stage = Stage.SELECTING_COLUMN
        return self.state.stage

    def select_column(self, column: str) -> None:
        self._require(Stage.SELECTING_COLUMN)
        if not column:
            raise ValueError("choose a column first")
        if column not in self.state.headers:
            raise ValueError(f"unknown column {column!r}; expected one of {self.state.headers}")
        self.state.selected_column = column

    def run(self, classify_fn: ClassifyFn, batch_size: Optional[int] = None,
            progress_callback: Optional[ProgressFn] = None) -> Stage:
        """Classify every unique comment; batch_size overrides the session default."""
        self._require(Stage.SELECTING_COLUMN)
        st = self.state
        if not st.selected_column:
            raise ValueError("choose a column first")
        batch_size = self.batch_size if batch_size is None else batch_size
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        st.stage = Stage.PROCESSING
        st.progress = 0.0
        try:
            prep = prepare_comments(st.rows, st.selected_column)
        except NoValidComments as e:
            log.error("%s", e)
            return self._fail(e)

        total = len(prep.unique)
        batches = prep.batches(batch_size)
        log.info("analyzing %d unique comments (%d rows) in %d batch(es)",
                 total, prep.total_rows, len(batches))

        done = 0
        for bi, batch in enumerate(batches, start=1):
            texts = [c.text for c in batch]
            try:
                results = repair_results(_checked(classify_fn(texts)), len(batch))
            except Exception as e:
                log.exception("batch %d/%d failed", bi, len(batches))
                return self._fail(ClassificationFailure(f"batch {bi}: {e}"))

            st.analyzed.extend(
                AnalyzedComment(
                    original_index=c.original_index,
                    comment=c.text,
                    original_comment=cell_text(st.rows[c.original_index].get(st.selected_column)),
                    sentiment=r.sentiment,
                    polarity=r.polarity,
                )
                for c, r in zip(batch, results)
            )
            done += len(batch)
            st.progress = min(100.0, done / total * 100)
            log.debug("batch %d/%d done, progress %.0f%%", bi, len(batches), st.progress)
            if progress_callback:
                try:
                    progress_callback(done, total, f"batch {bi}/{len(batches)}")
                except Exception:
                    # progress is display only; the run carries on
                    log.exception("progress callback failed after batch %d/%d", bi, len(batches))

        st.stage = Stage.DONE
        return st.stage

    # ── results ──────────────────────────────────────────────

    def stats(self) -> Optional[RunStats]:
        if self.state.stage is not Stage.DONE:
            return None
        return compute_stats(len(self.state.rows), self.state.analyzed)

    def table(self, sort_by: str = "strength", ascending: bool = False,
              limit: Optional[int] = 100) -> pd.DataFrame:
        return results_table(self.state.analyzed, sort_by=sort_by, ascending=ascending, limit=limit)

    def insight(self, summarize_fn: SummarizeFn) -> str:
        """Summary paragraph; any summarizer failure yields FALLBACK_INSIGHT."""
        self._require(Stage.DONE)
        corpus = build_insight_corpus(self.state.analyzed)
        try:
            text = summarize_fn(corpus)
        except Exception as e:
            log.warning("insight generation failed: %s", e)
            return FALLBACK_INSIGHT
        if not isinstance(text, str) or not text.strip():
            log.warning("insight generation returned no text (%s)", type(text).__name__)
            return FALLBACK_INSIGHT
        return text.strip()

    @property
    def description(self) -> str:
        return STAGE_DESCRIPTIONS[self.state.stage]

    # ── helpers ──────────────────────────────────────────────

    def _require(self, *stages: Stage) -> None:
        if self.state.stage not in stages:
            allowed = ", ".join(s.value for s in stages)
            raise RuntimeError(f"session is in stage {self.state.stage.value!r}, expected {allowed}")

    def _fail(self, err: SentimentPipelineError) -> Stage:
        # analyzed comments from earlier batches stay in memory
        self.state.stage = Stage.ERROR
        self.state.error = err.user_message
        self.state.failure = err
        return self.state.stage
