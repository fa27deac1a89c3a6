# src/comment_sentiment/data_prep.py
from __future__ import annotations
import csv, io, re, logging, unicodedata
from dataclasses import dataclass, field
from typing import IO, Any, Dict, List, Sequence, Tuple, TypeVar, Union
import pandas as pd

from .errors import NoValidComments, ParseFailure
from .models import ExtractedComment, Row, UniqueComment

log = logging.getLogger(__name__)

T = TypeVar("T")

# ----------------------------
# Text normalization
# ----------------------------
URL_RX = re.compile(r"(?:https?|ftp)://\S+")
TAG_RX = re.compile(r"[@#][\w-]+")          # @mentions and #hashtags
WS_RX = re.compile(r"\s+")
KEEP_PUNCT = frozenset("'\"-.,!?")


def _keep_char(ch: str) -> bool:
    # letters (with their combining marks) and numbers of any script
    return ch.isspace() or ch in KEEP_PUNCT or unicodedata.category(ch)[0] in "LMN"


def normalize_text(s: Any) -> str:
    """
    Clean one comment for classification:
      urls -> mentions/hashtags -> emoji & symbols -> lowercase -> whitespace.
    Never raises; non-strings give "".
    """
    if not isinstance(s, str) or not s:
        return ""
    s = URL_RX.sub("", s)
    s = TAG_RX.sub("", s)
    s = "".join(ch for ch in s if _keep_char(ch))
    s = s.lower()
    return WS_RX.sub(" ", s).strip()


# ----------------------------
# CSV loading
# ----------------------------
_ENCODINGS = ("utf-8-sig", "latin-1")


def _read_text(source: Union[str, IO]) -> Tuple[str, str]:
    if hasattr(source, "read"):
        if hasattr(source, "seek"):
            source.seek(0)
        raw = source.read()
    else:
        with open(source, "rb") as fh:
            raw = fh.read()
    if isinstance(raw, str):
        return raw, "text"
    for enc in _ENCODINGS:
        try:
            return raw.decode(enc), enc
        except UnicodeDecodeError:
            continue
    raise ParseFailure("could not decode file")


def _check_field_counts(text: str) -> None:
    # pandas pads short rows with empty cells; a ragged row means a broken file
    reader = csv.reader(io.StringIO(text, newline=""))
    try:
        header = next(reader, None)
        if not header:
            raise ParseFailure("no header row")
        for row in reader:
            if not row or (len(row) == 1 and not row[0].strip()):
                continue  # blank line
            if len(row) != len(header):
                raise ParseFailure(
                    f"line {reader.line_num}: expected {len(header)} fields, saw {len(row)}")
    except csv.Error as e:
        raise ParseFailure(f"line {reader.line_num}: {e}") from e


def load_comments(source: Union[str, IO]) -> Tuple[List[Dict[str, str]], List[str]]:
    """
    Parse a CSV with a header row into (rows, headers).

    Every cell is kept as a string; blank lines are skipped. Tries utf-8 first
    (BOM tolerated), then latin-1. Rows whose field count differs from the
    header, and any reader error, become ParseFailure.
    """
    try:
        text, enc = _read_text(source)
    except OSError as e:
        raise ParseFailure(f"{type(e).__name__}: {e}") from e
    _check_field_counts(text)
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False,
                         skip_blank_lines=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise ParseFailure(f"{type(e).__name__}: {e}") from e

    # zero-width / BOM leftovers in header names
    df.columns = [re.sub(r"[\u200b\u200e\ufeff]", "", str(c)).strip() for c in df.columns]
    headers = list(df.columns)
    rows = df.to_dict("records")
    log.info("parsed %d rows, %d columns (encoding=%s)", len(rows), len(headers), enc)
    return rows, headers


# ----------------------------
# Extraction + dedup
# ----------------------------
def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value)


def extract_comments(rows: Sequence[Row], column: str) -> List[ExtractedComment]:
    out = []
    for i, row in enumerate(rows):
        txt = cell_text(row.get(column))
        if txt.strip():
            out.append(ExtractedComment(i, txt))
    return out


def chunk_list(items: Sequence[T], chunk_size: int = 50) -> List[List[T]]:
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    return [list(items[i:i + chunk_size]) for i in range(0, len(items), chunk_size)]


@dataclass
class PreparedComments:
    """Unique comments in first-seen order, plus the row accounting behind them."""
    unique: List[UniqueComment] = field(default_factory=list)
    total_rows: int = 0
    empty_rows: int = 0        # blank cell, or nothing left after cleaning
    duplicate_rows: int = 0

    def batches(self, batch_size: int = 50) -> List[List[UniqueComment]]:
        return chunk_list(self.unique, chunk_size=batch_size)


def prepare_comments(rows: Sequence[Row], column: str) -> PreparedComments:
    """
    rows -> non-empty comments -> normalized -> first occurrence of each text.
    Raises NoValidComments when nothing survives.
    """
    extracted = extract_comments(rows, column)
    prep = PreparedComments(total_rows=len(rows), empty_rows=len(rows) - len(extracted))

    seen = set()
    for c in extracted:
        key = normalize_text(c.text)
        if not key:
            prep.empty_rows += 1
            continue
        if key in seen:
            prep.duplicate_rows += 1
            continue
        seen.add(key)
        prep.unique.append(UniqueComment(c.original_index, key))

    log.debug("column=%r rows=%d empty=%d dup=%d unique=%d", column, prep.total_rows,
              prep.empty_rows, prep.duplicate_rows, len(prep.unique))
    if not prep.unique:
        raise NoValidComments(f"column {column!r} has no non-empty comments")
    return prep
