import pytest

from comment_sentiment.metrics import (
    TABLE_COLUMNS, build_insight_corpus, compute_stats, results_table, template_insight,
)
from comment_sentiment.models import AnalyzedComment, RunStats


def _c(i, text, label, pol):
    return AnalyzedComment(original_index=i, comment=text.lower(), original_comment=text,
                           sentiment=label, polarity=pol)


@pytest.fixture
def analyzed():
    return [
        _c(0, "Love it", "positive", 0.9),
        _c(2, "Hate it", "negative", -0.95),
        _c(3, "It exists", "neutral", 0.0),
        _c(5, "Pretty good", "positive", 0.4),
        _c(6, "Not great", "negative", -0.4),
    ]


def test_compute_stats_counts_all_rows(analyzed):
    assert compute_stats(10, analyzed) == RunStats(total=10, valid=5, positive=2, negative=2, neutral=1)
    assert compute_stats(3, []) == RunStats(3, 0, 0, 0, 0)


def test_table_default_strength_order(analyzed):
    tbl = results_table(analyzed)
    assert list(tbl.columns) == TABLE_COLUMNS
    # ties (0.4 / -0.4) keep input order
    assert list(tbl["Original Comment"]) == ["Hate it", "Love it", "Pretty good", "Not great", "It exists"]


def test_table_sort_by_column_and_limit(analyzed):
    tbl = results_table(analyzed, sort_by="Polarity", ascending=True, limit=2)
    assert list(tbl["Polarity"]) == [-0.95, -0.4]
    tbl = results_table(analyzed, sort_by="strength", ascending=True, limit=None)
    assert tbl["Original Comment"].iloc[0] == "It exists"
    assert len(tbl) == 5


def test_table_bad_sort_key(analyzed):
    with pytest.raises(ValueError):
        results_table(analyzed, sort_by="likes")


def test_table_empty():
    tbl = results_table([])
    assert tbl.empty and list(tbl.columns) == TABLE_COLUMNS


def test_insight_corpus_format():
    long = "x" * 150
    corpus = build_insight_corpus([_c(0, long, "neutral", 0.123), _c(1, "Ok", "positive", 0.5)])
    lines = corpus.split("\n")
    assert lines[0] == f"Comment: {'x' * 100}... | Polarity: 0.12"
    assert lines[1] == "Comment: ok... | Polarity: 0.50"


def test_template_insight_reads_corpus(analyzed):
    text = template_insight(build_insight_corpus(analyzed))
    assert text.startswith("Across 5 unique comments the overall tone is mixed")
    assert "40% of comments lean positive" in text
    assert "2 comments express a strong opinion" in text


def test_template_insight_needs_data():
    with pytest.raises(ValueError):
        template_insight("")
