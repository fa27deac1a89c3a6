"""Batch sentiment analysis for social-media comment CSVs."""

from .data_prep import normalize_text, prepare_comments, load_comments
from .errors import ClassificationFailure, NoValidComments, ParseFailure, SummarizationFailure
from .models import AnalyzedComment, RunStats, SentimentResult, UniqueComment
from .pipeline import AnalysisSession, Stage, repair_results

__version__ = "0.1.0"

__all__ = [
    "AnalysisSession",
    "AnalyzedComment",
    "ClassificationFailure",
    "NoValidComments",
    "ParseFailure",
    "RunStats",
    "SentimentResult",
    "Stage",
    "SummarizationFailure",
    "UniqueComment",
    "load_comments",
    "normalize_text",
    "prepare_comments",
    "repair_results",
]
