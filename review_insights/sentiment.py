from __future__ import annotations
import logging
import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Iterable, List, Optional, Sequence

from tqdm import tqdm
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from .aggregate import calculate_metrics
from .config import CFG
from .schemas import AnalysisSummary, RawReview, ScoredReview

logger = logging.getLogger(__name__)

# text -> summed word polarity
Lexicon = Callable[[str], float]

_TAG_RE = re.compile(r"<[^>]*>")
_NON_WORD_RE = re.compile(r"[^\w\s]", re.ASCII)
_WS_RE = re.compile(r"\s+")

POSITIVE_THRESHOLD = 2
NEGATIVE_THRESHOLD = -2


@lru_cache(maxsize=1)
def _analyzer():
    # Only the word -> valence table is used; VADER's own compound scoring is bounded to [-1, 1]
    return SentimentIntensityAnalyzer()


def lexicon_score(text: str) -> float:
    """Sum of per-token lexicon valences over already-cleaned text."""
    valences = _analyzer().lexicon
    return round(sum(valences.get(tok, 0.0) for tok in text.split()), 4)


def clean_text(text) -> str:
    if not isinstance(text, str) or not text:
        return ""
    t = text.lower()
    t = _TAG_RE.sub("", t)
    t = _NON_WORD_RE.sub(" ", t)
    return _WS_RE.sub(" ", t).strip()


def label_for(score: float) -> str:
    if score > POSITIVE_THRESHOLD:
        return "positive"
    if score < NEGATIVE_THRESHOLD:
        return "negative"
    return "neutral"


def confidence_for(score: float) -> float:
    return min(abs(score) / 10, 1.0)


def analyze_review(review: RawReview, lexicon: Optional[Lexicon] = None) -> ScoredReview:
    """Score one review. Blank text after cleaning is neutral with zero confidence."""
    cleaned = clean_text(review.review_text)
    passthrough = dict(
        product_id=review.product_id,
        product_name=review.product_name,
        rating=review.rating,
        date=review.date,
        review_date=review.review_date,
    )
    if not cleaned:
        return ScoredReview(
            id=review.review_id, text=review.review_text, cleaned_text="",
            score=0, label="neutral", confidence=0.0, **passthrough,
        )

    score = (lexicon or lexicon_score)(cleaned)
    return ScoredReview(
        id=review.review_id,
        text=review.review_text,
        cleaned_text=cleaned,
        score=score,
        label=label_for(score),
        confidence=confidence_for(score),
        **passthrough,
    )


@dataclass(frozen=True)
class Progress:
    processed: int
    total: int
    percentage: int


@dataclass(frozen=True)
class ScoringResult:
    reviews: List[ScoredReview]
    summary: AnalysisSummary


def _chunks(seq: Sequence, size: int) -> Iterable[Sequence]:
    for i in range(0, len(seq), size):
        yield seq[i:i + size]


def process_reviews(
    reviews: Sequence[RawReview],
    progress_callback: Optional[Callable[[Progress], None]] = None,
    lexicon: Optional[Lexicon] = None,
    batch_size: Optional[int] = None,
) -> ScoringResult:
    """
    Score every review in input order, then aggregate.
    Progress is reported after each batch (every `batch_size` items) and on completion;
    the callback only observes, it cannot change the output.
    """
    batch_size = batch_size or CFG.progress_batch_size
    total = len(reviews)
    logger.info("scoring %d reviews", total)

    scored: List[ScoredReview] = []
    batches = _chunks(reviews, batch_size)
    if CFG.show_progress:
        batches = tqdm(batches, total=math.ceil(total / batch_size), leave=False)

    for batch in batches:
        scored.extend(analyze_review(r, lexicon) for r in batch)
        done = len(scored)
        pct = math.floor(done / total * 100 + 0.5)
        logger.debug("sentiment progress: %d/%d (%d%%)", done, total, pct)
        if progress_callback is not None:
            progress_callback(Progress(processed=done, total=total, percentage=pct))

    return ScoringResult(reviews=scored, summary=calculate_metrics(scored))
