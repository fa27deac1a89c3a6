import matplotlib
matplotlib.use("Agg")

import pytest

from comment_sentiment.models import SentimentResult


class FakeClassifier:
    """Records every batch; returns canned results per call or a fixed label."""

    def __init__(self, responses=None, fail_on=None, label="neutral"):
        self.responses = list(responses or [])
        self.fail_on = fail_on
        self.label = label
        self.calls = []

    def __call__(self, texts):
        self.calls.append(list(texts))
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise ConnectionError("backend unavailable")
        if self.responses:
            return self.responses.pop(0)
        return [SentimentResult(self.label, 0.0) for _ in texts]


@pytest.fixture
def fake_classifier():
    return FakeClassifier


@pytest.fixture
def scenario_rows():
    return [{"c": "I love this!"}, {"c": "bad."}, {"c": "bad."}, {"c": ""}]
