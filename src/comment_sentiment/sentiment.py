# src/comment_sentiment/sentiment.py
"""Offline classifier backend: VADER compound score as polarity."""
from __future__ import annotations
from typing import List, Optional, Sequence
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from .models import SentimentResult

POS_THRESHOLD = 0.05
NEG_THRESHOLD = -0.05

_analyzer: Optional[SentimentIntensityAnalyzer] = None
def _get_analyzer() -> SentimentIntensityAnalyzer:
    global _analyzer
    if _analyzer is None:
        _analyzer = SentimentIntensityAnalyzer()
    return _analyzer


def label_for(compound: float) -> str:
    # same bins as pd.cut([-1, -0.05, 0.05, 1]): right edge inclusive
    if compound > POS_THRESHOLD:
        return "positive"
    if compound <= NEG_THRESHOLD:
        return "negative"
    return "neutral"


def vader_classify_batch(comments: Sequence[str]) -> List[SentimentResult]:
    an = _get_analyzer()
    out = []
    for c in comments:
        compound = float(an.polarity_scores(c)["compound"])
        out.append(SentimentResult(label_for(compound), compound))
    return out
