"""Record types passed between the pipeline stages."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Mapping, Union

Row = Mapping[str, Union[str, int, float]]

SENTIMENT_LABELS = ("positive", "negative", "neutral")


@dataclass(frozen=True)
class ExtractedComment:
    original_index: int
    text: str


# Same shape as ExtractedComment, text is normalized.
CleanedComment = ExtractedComment
UniqueComment = ExtractedComment


@dataclass(frozen=True)
class SentimentResult:
    sentiment: str
    polarity: float

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls("neutral", 0.0)


@dataclass(frozen=True)
class AnalyzedComment:
    original_index: int
    comment: str               # normalized text sent to the classifier
    original_comment: str
    sentiment: str
    polarity: float


@dataclass(frozen=True)
class RunStats:
    total: int
    valid: int
    positive: int
    negative: int
    neutral: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "valid": self.valid,
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
        }

