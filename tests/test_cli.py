import pytest

from comment_sentiment import cli
from comment_sentiment.config import load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("OPENAI_API_KEY", "SENTIMENT_MODEL", "SENTIMENT_BACKEND",
                "SENTIMENT_BATCH_SIZE", "SENTIMENT_TABLE_LIMIT"):
        monkeypatch.delenv(key, raising=False)
    # ignore any .env in the working tree
    monkeypatch.setattr(cli, "load_settings", lambda: load_settings(use_dotenv=False))


@pytest.fixture
def csv_file(tmp_path):
    p = tmp_path / "comments.csv"
    p.write_text(
        "user,text\n"
        "a,I love this so much!\n"
        "b,This is terrible and I hate it.\n"
        "c,This is terrible and I hate it.\n"
        "d,\n"
        "e,the video is 30 seconds long\n",
        encoding="utf-8",
    )
    return p


def test_lists_columns_without_column(csv_file, capsys):
    assert cli.main(["analyze", str(csv_file)]) == 2
    out = capsys.readouterr().out
    assert "user" in out and "text" in out


def test_unknown_column(csv_file, capsys):
    assert cli.main(["analyze", str(csv_file), "--column", "body"]) == 2
    assert "unknown column" in capsys.readouterr().err


def test_parse_error(tmp_path, capsys):
    bad = tmp_path / "bad.csv"
    bad.write_text("", encoding="utf-8")
    assert cli.main(["analyze", str(bad), "--column", "text"]) == 1
    assert "Failed to parse the CSV file" in capsys.readouterr().err


def test_no_valid_comments(tmp_path, capsys):
    p = tmp_path / "empty.csv"
    p.write_text("text,other\n,x\n ,y\n", encoding="utf-8")
    assert cli.main(["analyze", str(p), "--column", "text", "--backend", "vader"]) == 1
    assert "No valid comments found" in capsys.readouterr().err


def test_vader_run_writes_dashboard(csv_file, tmp_path, capsys):
    out_dir = tmp_path / "out"
    rc = cli.main(["analyze", str(csv_file), "--column", "text", "--backend", "vader",
                   "--batch-size", "2", "--insight", "--out-dir", str(out_dir)])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Analysis Complete" in out
    assert "total" in out and "valid" in out
    assert "Across 3 unique comments" in out
    for name in ("stats.png", "sentiment_distribution.png", "top_comments.png", "results.csv"):
        assert (out_dir / name).exists()


def test_openai_without_key_fails_cleanly(csv_file, monkeypatch, capsys):
    from comment_sentiment import openai_llm
    monkeypatch.setattr(openai_llm, "_client", None)
    assert cli.main(["analyze", str(csv_file), "--column", "text", "--backend", "openai"]) == 1
    assert "An error occurred during analysis" in capsys.readouterr().err


def test_bad_batch_size(csv_file):
    assert cli.main(["analyze", str(csv_file), "--column", "text", "--batch-size", "0"]) == 2


@pytest.mark.parametrize("limit", ["0", "-1"])
def test_bad_table_limit(csv_file, capsys, limit):
    assert cli.main(["analyze", str(csv_file), "--column", "text", "--table-limit", limit]) == 2
    assert "--table-limit must be >= 1" in capsys.readouterr().err


def test_table_limit_caps_printed_rows(csv_file, capsys):
    assert cli.main(["analyze", str(csv_file), "--column", "text", "--backend", "vader"]) == 0
    assert "30 seconds" in capsys.readouterr().out
    assert cli.main(["analyze", str(csv_file), "--column", "text", "--backend", "vader",
                     "--table-limit", "1"]) == 0
    assert "30 seconds" not in capsys.readouterr().out
