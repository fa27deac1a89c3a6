import pytest

from comment_sentiment.config import DEFAULT_BATCH_SIZE, DEFAULT_MODEL, Settings, load_settings


def test_defaults():
    assert load_settings({}) == Settings(
        openai_api_key=None, model=DEFAULT_MODEL, backend="openai",
        batch_size=DEFAULT_BATCH_SIZE, table_limit=100,
    )


def test_values_from_env():
    s = load_settings({
        "OPENAI_API_KEY": "sk-test",
        "SENTIMENT_MODEL": "gpt-4o",
        "SENTIMENT_BACKEND": " VADER ",
        "SENTIMENT_BATCH_SIZE": "25",
        "SENTIMENT_TABLE_LIMIT": "10",
    })
    assert (s.openai_api_key, s.model, s.backend, s.batch_size, s.table_limit) == \
        ("sk-test", "gpt-4o", "vader", 25, 10)


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("SENTIMENT_BATCH_SIZE", "7")
    monkeypatch.setenv("SENTIMENT_BACKEND", "vader")
    s = load_settings(use_dotenv=False)
    assert s.batch_size == 7 and s.backend == "vader"


@pytest.mark.parametrize("env", [
    {"SENTIMENT_BACKEND": "bert"},
    {"SENTIMENT_BATCH_SIZE": "fifty"},
    {"SENTIMENT_BATCH_SIZE": "0"},
    {"SENTIMENT_TABLE_LIMIT": "-3"},
])
def test_invalid_values(env):
    with pytest.raises(ValueError):
        load_settings(env)
