from __future__ import annotations
import re
from typing import Optional, Sequence
import numpy as np
import pandas as pd

from .models import SENTIMENT_LABELS, AnalyzedComment, RunStats

TABLE_COLUMNS = ["Original Comment", "Cleaned Comment", "Sentiment", "Polarity"]


def compute_stats(total_rows: int, analyzed: Sequence[AnalyzedComment]) -> RunStats:
    # total counts every parsed row, including the ones dropped as empty
    counts = {lab: 0 for lab in SENTIMENT_LABELS}
    for c in analyzed:
        counts[c.sentiment] = counts.get(c.sentiment, 0) + 1
    return RunStats(
        total=total_rows,
        valid=len(analyzed),
        positive=counts["positive"],
        negative=counts["negative"],
        neutral=counts["neutral"],
    )


def to_frame(analyzed: Sequence[AnalyzedComment]) -> pd.DataFrame:
    return pd.DataFrame({
        "original_index": [c.original_index for c in analyzed],
        "Original Comment": [c.original_comment for c in analyzed],
        "Cleaned Comment": [c.comment for c in analyzed],
        "Sentiment": [c.sentiment for c in analyzed],
        "Polarity": pd.Series([c.polarity for c in analyzed], dtype=float),
    })


def results_table(
    analyzed: Sequence[AnalyzedComment],
    sort_by: str = "strength",
    ascending: bool = False,
    limit: Optional[int] = 100,
) -> pd.DataFrame:
    """
    Rows for the results table.

    sort_by="strength" orders by |polarity| (strongest opinions first);
    any of TABLE_COLUMNS sorts on that column. Ties keep input order.
    """
    df = to_frame(analyzed)
    if sort_by == "strength":
        key = df["Polarity"].abs()
        df = df.iloc[np.argsort(key.to_numpy() * (1 if ascending else -1), kind="stable")]
    elif sort_by in TABLE_COLUMNS:
        df = df.sort_values(sort_by, ascending=ascending, kind="stable")
    else:
        raise ValueError(f"cannot sort by {sort_by!r}; use 'strength' or one of {TABLE_COLUMNS}")
    if limit is not None:
        df = df.head(limit)
    return df[TABLE_COLUMNS].reset_index(drop=True)


def build_insight_corpus(analyzed: Sequence[AnalyzedComment], prefix_len: int = 100) -> str:
    return "\n".join(
        f"Comment: {c.comment[:prefix_len]}... | Polarity: {c.polarity:.2f}" for c in analyzed
    )


_POL_RX = re.compile(r"\|\s*Polarity:\s*(-?\d+(?:\.\d+)?)\s*$", re.M)


def template_insight(sentiment_data: str) -> str:
    """Offline stand-in for the LLM summary: describe the polarity distribution."""
    pols = np.array([float(x) for x in _POL_RX.findall(sentiment_data or "")])
    if pols.size == 0:
        raise ValueError("no polarity values found in sentiment data")
    pos = float((pols > 0.05).mean())
    neg = float((pols <= -0.05).mean())
    mean = float(pols.mean())
    tone = "mostly positive" if mean > 0.2 else ("mostly negative" if mean < -0.2 else "mixed")
    strong = int((np.abs(pols) >= 0.75).sum())
    return (
        f"Across {pols.size} unique comments the overall tone is {tone} "
        f"(average polarity {mean:+.2f}). {pos:.0%} of comments lean positive and "
        f"{neg:.0%} lean negative, with polarity ranging from {pols.min():+.2f} to "
        f"{pols.max():+.2f}. {strong} comment{'s' if strong != 1 else ''} "
        f"express{'' if strong != 1 else 'es'} a strong opinion (|polarity| >= 0.75)."
    )
