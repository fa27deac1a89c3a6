# src/comment_sentiment/errors.py
"""Exceptions raised by the analysis pipeline.

Only ParseFailure, NoValidComments and ClassificationFailure move a session
into the error stage. SummarizationFailure is always absorbed by the caller.
"""


class SentimentPipelineError(Exception):
    """Base class; ``user_message`` is what the dashboard shows."""

    user_message = "An unexpected error occurred."

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.user_message)
        self.detail = detail


class ParseFailure(SentimentPipelineError):
    user_message = "Failed to parse the CSV file. Please ensure it is correctly formatted."


class NoValidComments(SentimentPipelineError):
    user_message = "No valid comments found to analyze in the selected column."


class ClassificationFailure(SentimentPipelineError):
    user_message = "An error occurred during analysis. Not all comments could be processed."


class SummarizationFailure(SentimentPipelineError):
    user_message = "Could not generate an insight at this time. Please try again later."
