"""
Corpus-level metrics over scored reviews:
- per-label count and integer percentage (each rounded on its own, so the three
  percentages may not add up to exactly 100)
- mean score (2 decimals) and min/max score
"""
from __future__ import annotations
import math
from typing import Sequence

import pandas as pd

from .schemas import LABELS, AnalysisSummary, ScoredReview, ScoreRange, SentimentBucket


def round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def calculate_metrics(reviews: Sequence[ScoredReview]) -> AnalysisSummary:
    total = len(reviews)
    if total == 0:
        return AnalysisSummary(
            total_reviews=0,
            sentiment_distribution={lab: SentimentBucket(count=0, percentage=0) for lab in LABELS},
            average_score=0,
            score_range=ScoreRange(),
        )

    df = pd.DataFrame({
        "label": [r.label for r in reviews],
        "score": [float(r.score) for r in reviews],
    })
    counts = df["label"].value_counts()

    distribution = {}
    for lab in LABELS:
        cnt = int(counts.get(lab, 0))
        distribution[lab] = SentimentBucket(count=cnt, percentage=int(round_half_up(cnt / total * 100)))

    return AnalysisSummary(
        total_reviews=total,
        sentiment_distribution=distribution,
        average_score=round_half_up(float(df["score"].mean()), 2),
        score_range=ScoreRange(min=float(df["score"].min()), max=float(df["score"].max())),
    )
