# src/comment_sentiment/openai_llm.py
from __future__ import annotations
import os, re, json, time, random, logging
from typing import Any, Dict, List, Optional, Sequence
from openai import OpenAI, APIError, RateLimitError

from .config import DEFAULT_MODEL
from .errors import ClassificationFailure, SummarizationFailure
from .models import SENTIMENT_LABELS, SentimentResult

log = logging.getLogger(__name__)

SENTIMENT_SCHEMA: Dict = {
    "name": "sentiment_schema",
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "results": {
                "type": "array",
                "items": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "sentiment": {"type": "string", "enum": list(SENTIMENT_LABELS)},
                        "polarity": {"type": "number", "minimum": -1, "maximum": 1},
                    },
                    "required": ["sentiment", "polarity"]
                }
            }
        },
        "required": ["results"]
    }
}

_SENTIMENT_SYSTEM = (
    "You are a sentiment analysis expert. For each comment in the provided JSON array, "
    "determine if its sentiment is positive, negative, or neutral, and give a polarity "
    "score from -1.0 (very negative) to 1.0 (very positive). "
    "Return one result per comment, in the original order. Output valid JSON only."
)

SENTIMENT_PROMPT = """Respond with a single JSON object containing a "results" key. The value of "results" is an
array of objects, one per comment in the input array, each with "sentiment" and "polarity" keys.
Maintain the original order.

Example Input:
["I love this!", "This is not good.", "It's okay I guess"]

Example Output:
{"results": [{"sentiment": "positive", "polarity": 0.8},
             {"sentiment": "negative", "polarity": -0.6},
             {"sentiment": "neutral", "polarity": 0.1}]}

Input comments:
"""

INSIGHT_PROMPT = """You are an expert in sentiment analysis. You will receive sentiment analysis results, with each
line representing a comment and its associated sentiment polarity score.

Provide a brief summary (one paragraph) of the range of sentiments expressed in the data.
Focus on overall trends and significant deviations.

Sentiment Data:
"""

_client: Optional[OpenAI] = None
def _get_client(api_key: Optional[str] = None) -> OpenAI:
    global _client
    if api_key:  # explicit key wins
        return OpenAI(api_key=api_key)
    if _client is None:
        key = os.getenv("OPENAI_API_KEY")
        if not key:
            raise RuntimeError("Set OPENAI_API_KEY or pass api_key explicitly.")
        _client = OpenAI(api_key=key)
    return _client


def _chat(messages: List[Dict[str, str]], *, model: str, api_key: Optional[str],
          temperature: float, response_format: Optional[Dict] = None,
          attempts: int = 4) -> str:
    """One chat completion with exponential backoff on API errors."""
    client = _get_client(api_key)
    kwargs: Dict[str, Any] = {"model": model, "temperature": temperature, "messages": messages}
    if response_format is not None:
        kwargs["response_format"] = response_format

    for attempt in range(attempts):
        try:
            resp = client.chat.completions.create(**kwargs)
            return resp.choices[0].message.content or ""
        except (RateLimitError, APIError) as e:
            if attempt == attempts - 1:
                raise
            wait = 1.2 * (2 ** attempt) + random.random() * 0.4
            log.warning("openai call failed (%s), retry %d/%d in %.1fs",
                        type(e).__name__, attempt + 1, attempts - 1, wait)
            time.sleep(wait)
    raise RuntimeError("unreachable")


def default_json_loader(text: str) -> Dict[str, Any]:
    # Try exact parse; if it fails, try the first {...} block, then strip code fences.
    try:
        return json.loads(text)
    except ValueError:
        m = re.search(r"\{.*\}", text, re.S)
        if m:
            try:
                return json.loads(m.group(0))
            except ValueError:
                pass
        cleaned = [ln for ln in text.strip().splitlines()
                   if not ln.strip().startswith(("```", "json"))]
        return json.loads("\n".join(cleaned))  # will raise; let caller handle


def _coerce_result(item: Any) -> SentimentResult:
    if not isinstance(item, dict):
        return SentimentResult.neutral()
    label = str(item.get("sentiment", "")).strip().lower()
    if label not in SENTIMENT_LABELS:
        label = "neutral"
    try:
        pol = float(item.get("polarity", 0.0))
    except (TypeError, ValueError):
        pol = 0.0
    if pol != pol:  # NaN
        pol = 0.0
    return SentimentResult(label, max(-1.0, min(1.0, pol)))


def parse_sentiment_response(text: str) -> List[SentimentResult]:
    """Model output -> results, in the order returned. Length is NOT checked here."""
    try:
        js = default_json_loader(text)
    except ValueError as e:
        raise ClassificationFailure(f"model returned invalid JSON: {e}") from e
    results = js.get("results") if isinstance(js, dict) else None
    if not isinstance(results, list):
        raise ClassificationFailure("model did not return a 'results' array")
    return [_coerce_result(it) for it in results]


def classify_batch(comments: Sequence[str], model: str = DEFAULT_MODEL,
                   api_key: Optional[str] = None) -> List[SentimentResult]:
    """
    Sentiment for one batch of normalized comments.

    The returned list may be shorter or longer than ``comments``; the pipeline
    repairs it. Any API failure is raised as ClassificationFailure.
    """
    if not comments:
        return []
    prompt = SENTIMENT_PROMPT + json.dumps(list(comments), ensure_ascii=False)
    try:
        raw = _chat(
            [{"role": "system", "content": _SENTIMENT_SYSTEM},
             {"role": "user", "content": prompt}],
            model=model, api_key=api_key, temperature=0.1,
            response_format={"type": "json_schema", "json_schema": SENTIMENT_SCHEMA},
        )
    except (APIError, RuntimeError) as e:
        raise ClassificationFailure(str(e)) from e
    return parse_sentiment_response(raw)


def summarize_insight(sentiment_data: str, model: str = DEFAULT_MODEL,
                      api_key: Optional[str] = None) -> str:
    """One free-text paragraph about the corpus. Raises SummarizationFailure."""
    try:
        text = _chat(
            [{"role": "user", "content": INSIGHT_PROMPT + sentiment_data}],
            model=model, api_key=api_key, temperature=0.4,
        )
    except (APIError, RuntimeError) as e:
        raise SummarizationFailure(str(e)) from e
    text = text.strip()
    if not text:
        raise SummarizationFailure("model returned an empty insight")
    return text
