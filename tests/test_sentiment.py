import pytest

from comment_sentiment.models import SENTIMENT_LABELS
from comment_sentiment.sentiment import label_for, vader_classify_batch


@pytest.mark.parametrize("compound,label", [
    (0.9, "positive"), (0.051, "positive"), (0.05, "neutral"), (0.0, "neutral"),
    (-0.049, "neutral"), (-0.05, "negative"), (-1.0, "negative"),
])
def test_label_thresholds(compound, label):
    assert label_for(compound) == label


def test_vader_batch():
    out = vader_classify_batch([
        "i love this, it is amazing!",
        "this is terrible and i hate it.",
        "the box is on the table",
    ])
    assert [r.sentiment for r in out] == ["positive", "negative", "neutral"]
    assert all(-1.0 <= r.polarity <= 1.0 for r in out)
    assert all(r.sentiment in SENTIMENT_LABELS for r in out)


def test_vader_empty_batch():
    assert vader_classify_batch([]) == []
