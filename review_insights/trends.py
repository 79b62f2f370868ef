"""
Time-based views over scored reviews.
- daily_trends: per-day label counts and mean score, downsampled to at most max_points
- compare_periods: earlier half vs later half of the corpus (by review date)
"""
from __future__ import annotations
import math
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import pandas as pd

from .aggregate import round_half_up
from .config import CFG
from .schemas import LABELS, PeriodStats, ScoredReview, TrendPoint, TrendShift

SCORE_CLAMP = 10.0
_EPOCH = pd.Timestamp(0, tz="UTC")


def _frame(reviews: Sequence[ScoredReview]) -> pd.DataFrame:
    raw = [r.review_date or r.date for r in reviews]
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    df = pd.DataFrame({
        "raw": raw,
        # calendar day as written in the source string, no timezone shift
        "day": [s.split("T")[0] if s else today for s in raw],
        "label": [r.label for r in reviews],
        "score": [float(r.score or 0) for r in reviews],
        "product_name": [r.product_name for r in reviews],
    })
    df["when"] = pd.to_datetime(df["raw"], utc=True, errors="coerce", format="ISO8601")
    return df


def _utc(ts: Optional[datetime]) -> Optional[pd.Timestamp]:
    if ts is None:
        return None
    t = pd.Timestamp(ts)
    return t.tz_localize("UTC") if t.tzinfo is None else t.tz_convert("UTC")


def _downsample(points: List[TrendPoint], max_points: int) -> List[TrendPoint]:
    step = math.ceil(len(points) / max_points)
    merged = []
    for i in range(0, len(points), step):
        group = points[i:i + step]
        merged.append(TrendPoint(
            date=group[0].date,
            positive=sum(p.positive for p in group),
            neutral=sum(p.neutral for p in group),
            negative=sum(p.negative for p in group),
            avg_sentiment=round_half_up(sum(p.avg_sentiment for p in group) / len(group), 2),
        ))
    return merged


def daily_trends(
    reviews: Sequence[ScoredReview],
    product_name: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    max_points: Optional[int] = None,
) -> List[TrendPoint]:
    """
    start/end are inclusive. Undated reviews sit at the epoch for window filtering and
    are bucketed under today; reviews whose date does not parse are left out.
    """
    max_points = max_points or CFG.trend_max_points
    if not reviews:
        return []

    df = _frame(reviews)
    df["when"] = df["when"].mask(df["raw"].isna(), _EPOCH)
    df = df[df["when"].notna()]
    if start is not None:
        df = df[df["when"] >= _utc(start)]
    if end is not None:
        df = df[df["when"] <= _utc(end)]
    if product_name is not None:
        df = df[df["product_name"] == product_name]
    if df.empty:
        return []

    counts = pd.crosstab(df["day"], df["label"]).reindex(columns=list(LABELS), fill_value=0)
    means = df.groupby("day")["score"].mean().clip(-SCORE_CLAMP, SCORE_CLAMP)

    points = [
        TrendPoint(
            date=day,
            positive=int(counts.at[day, "positive"]),
            neutral=int(counts.at[day, "neutral"]),
            negative=int(counts.at[day, "negative"]),
            avg_sentiment=round_half_up(float(means[day]), 2),
        )
        for day in sorted(counts.index)
    ]
    if len(points) > max_points:
        points = _downsample(points, max_points)
    return points


def _period_stats(df: pd.DataFrame) -> PeriodStats:
    if df.empty:
        return PeriodStats(positive=0, negative=0, neutral=0, avg_score=0)
    share = df["label"].value_counts(normalize=True) * 100
    return PeriodStats(
        positive=round_half_up(float(share.get("positive", 0)), 1),
        negative=round_half_up(float(share.get("negative", 0)), 1),
        neutral=round_half_up(float(share.get("neutral", 0)), 1),
        avg_score=float(df["score"].mean()),
    )


def compare_periods(reviews: Sequence[ScoredReview]) -> TrendShift:
    """
    Sort by review date (undated reviews last, input order kept for ties), split at
    floor(n / 2) and report later minus earlier for each label share and the mean score.
    """
    df = _frame(reviews)
    df = df.sort_values("when", kind="mergesort", na_position="last")
    mid = len(df) // 2
    earlier, later = _period_stats(df.iloc[:mid]), _period_stats(df.iloc[mid:])
    changes = PeriodStats(
        positive=round_half_up(later.positive - earlier.positive, 1),
        negative=round_half_up(later.negative - earlier.negative, 1),
        neutral=round_half_up(later.neutral - earlier.neutral, 1),
        avg_score=later.avg_score - earlier.avg_score,
    )
    return TrendShift(earlier=earlier, later=later, changes=changes)
