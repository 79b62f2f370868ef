"""
Parse an uploaded review dataset (CSV or JSON) into RawReview records.

CSV layouts, detected once from the first data row:
- extended: the Amazon Fine Food export
  (Id, ProductId, UserId, ProfileName, HelpfulnessNumerator, HelpfulnessDenominator,
   Score, Time, Summary, Text)
- simple: review_text, review_id, rating, product_name, user_id, review_date, summary

Rows missing a required field, and ragged rows with too many fields, are dropped;
only an empty result is an error.
CSV reads stop at CFG.max_csv_rows valid rows. JSON input is not capped.
"""
from __future__ import annotations

import io
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from .config import CFG
from .errors import ParseError, UnsupportedFileType
from .schemas import RawReview

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".json")

SENTINEL_COLS = ("ProductId", "Text", "Score")
EXTENDED_COLS = {"Id","ProductId","UserId","ProfileName","HelpfulnessNumerator","HelpfulnessDenominator","Score","Time","Summary","Text"}


class SchemaVariant(str, Enum):
    EXTENDED = "extended"
    SIMPLE = "simple"


# ------------- value helpers -------------

def _iso(ts: datetime) -> str:
    # millisecond precision, UTC "Z" suffix
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"

def _now_iso() -> str:
    return _iso(datetime.now(timezone.utc))

def _epoch_to_iso(value: Any) -> Optional[str]:
    """Unix seconds -> ISO-8601 UTC, or None when the value is not a usable timestamp."""
    try:
        return _iso(datetime.fromtimestamp(int(float(value)), tz=timezone.utc))
    except (TypeError, ValueError, OverflowError, OSError):
        return None

def _to_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return default

def _present(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    return str(value).strip() != ""

def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)

def _text(row: Mapping[str, Any], col: str) -> str:
    return str(row.get(col) or "")


# ------------- CSV layouts -------------

def detect_variant(first_row: Mapping[str, Any]) -> SchemaVariant:
    """Pick the column layout from the first data row: all sentinel values present -> extended."""
    if all(_present(first_row.get(col)) for col in SENTINEL_COLS):
        return SchemaVariant.EXTENDED
    return SchemaVariant.SIMPLE


def missing_extended_columns(columns) -> List[str]:
    return sorted(EXTENDED_COLS - set(columns))


def _map_extended(row: Mapping[str, Any], now: str) -> RawReview:
    rid = _text(row, "Id")
    product = _text(row, "ProductId") or None
    return RawReview(
        review_id=rid if rid.strip() else f"amazon_{uuid.uuid4().hex}",
        review_text=_text(row, "Text"),
        rating=_to_int(row.get("Score")),
        product_id=product,
        product_name=product,
        user_id=_text(row, "UserId"),
        profile_name=_text(row, "ProfileName"),
        helpfulness_numerator=_to_int(row.get("HelpfulnessNumerator")),
        helpfulness_denominator=_to_int(row.get("HelpfulnessDenominator")),
        review_date=_epoch_to_iso(row.get("Time")) or now,
        summary=_text(row, "Summary"),
    )


def _map_simple(row: Mapping[str, Any], now: str) -> RawReview:
    return RawReview(
        review_id=_text(row, "review_id"),
        review_text=_text(row, "review_text"),
        rating=_to_int(row.get("rating")),
        product_name=_text(row, "product_name") or "Unknown Product",
        product_id=_text(row, "product_id") or None,
        user_id=_text(row, "user_id"),
        review_date=_text(row, "review_date") or now,
        summary=_text(row, "summary"),
    )


@dataclass(frozen=True)
class _Layout:
    required: Tuple[str, ...]
    map_row: Callable[[Mapping[str, Any], str], RawReview]


_LAYOUTS: Dict[SchemaVariant, _Layout] = {
    SchemaVariant.EXTENDED: _Layout(required=("Text", "Score"), map_row=_map_extended),
    SchemaVariant.SIMPLE: _Layout(required=("review_text", "review_id"), map_row=_map_simple),
}


def filter_valid(df: pd.DataFrame, required: Tuple[str, ...]) -> pd.DataFrame:
    """Keep rows whose required columns are all non-blank. A missing column drops every row."""
    missing = [c for c in required if c not in df.columns]
    if missing:
        return df.iloc[0:0]
    mask = pd.Series(True, index=df.index)
    for col in required:
        mask &= df[col].astype(str).str.strip().ne("")
    return df[mask]


def map_rows(df: pd.DataFrame, variant: SchemaVariant, now: Optional[str] = None) -> List[RawReview]:
    """Filter-then-map one block of CSV rows with the given layout."""
    layout = _LAYOUTS[variant]
    now = now or _now_iso()
    valid = filter_valid(df, layout.required)
    dropped = len(df) - len(valid)
    if dropped:
        logger.debug("dropped %d rows missing %s", dropped, "/".join(layout.required))
    return [layout.map_row(row, now) for row in valid.to_dict("records")]


def parse_csv(data: bytes, max_rows: Optional[int] = None) -> List[RawReview]:
    max_rows = CFG.max_csv_rows if max_rows is None else max_rows
    now = _now_iso()
    reviews: List[RawReview] = []
    variant: Optional[SchemaVariant] = None
    rows_read = 0

    try:
        with pd.read_csv(
            io.BytesIO(data),
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            on_bad_lines="skip",
            chunksize=CFG.csv_chunk_rows,
        ) as reader:
            for chunk in reader:
                if chunk.empty:
                    continue
                chunk = chunk.fillna("")
                if variant is None:
                    variant = detect_variant(chunk.iloc[0].to_dict())
                    logger.info("detected %s CSV layout", variant.value)
                    if variant is SchemaVariant.EXTENDED:
                        missing = missing_extended_columns(chunk.columns)
                        if missing:
                            logger.info("extended layout without columns %s; using defaults", missing)
                rows_read += len(chunk)

                batch = map_rows(chunk, variant, now)
                reviews.extend(batch[: max_rows - len(reviews)])
                if len(reviews) >= max_rows:
                    logger.info("reached limit of %d reviews after %d rows; stopping CSV read", max_rows, rows_read)
                    break
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ParseError(f"CSV parsing error: {e}") from e

    if not reviews:
        raise ParseError("No valid data found in CSV file")

    logger.info("parsed %d reviews from %d CSV rows (%s layout)", len(reviews), rows_read, variant.value)
    return reviews


# ------------- JSON -------------

def _from_json(item: Mapping[str, Any], now: str) -> RawReview:
    date = _opt_str(item.get("date"))
    return RawReview(
        review_id=str(item["review_id"]),
        review_text=str(item["review_text"]),
        rating=_to_int(item.get("rating")),
        product_id=_opt_str(item.get("product_id")),
        product_name=_opt_str(item.get("product_name")),
        user_id=_opt_str(item.get("user_id")),
        profile_name=_opt_str(item.get("profile_name")),
        review_date=_opt_str(item.get("review_date")) or date or now,
        date=date,
        summary=_opt_str(item.get("summary")),
        helpfulness_numerator=_to_int(item.get("helpfulness_numerator")),
        helpfulness_denominator=_to_int(item.get("helpfulness_denominator")),
    )


def parse_json(data: bytes) -> List[RawReview]:
    """Accepts a bare array of review objects or {"reviews": [...]}."""
    try:
        doc = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"JSON parsing error: {e}") from e

    if isinstance(doc, list):
        items = doc
    elif isinstance(doc, dict):
        items = doc.get("reviews")
        if items is None:
            items = []
    else:
        items = []

    if not isinstance(items, list):
        raise ParseError("JSON must contain an array of reviews")

    now = _now_iso()
    valid = [
        it for it in items
        if isinstance(it, dict) and _present(it.get("review_text")) and _present(it.get("review_id"))
    ]
    if not valid:
        raise ParseError("No valid reviews found with required fields: review_text and review_id")

    if len(valid) < len(items):
        logger.debug("dropped %d JSON entries missing review_text/review_id", len(items) - len(valid))
    logger.info("parsed %d reviews from JSON", len(valid))
    return [_from_json(it, now) for it in valid]


def normalize_extension(extension: str) -> str:
    ext = (extension or "").strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def parse_upload(data: bytes, extension: str) -> List[RawReview]:
    ext = normalize_extension(extension)
    if ext == ".csv":
        return parse_csv(data)
    if ext == ".json":
        return parse_json(data)
    raise UnsupportedFileType(ext)
