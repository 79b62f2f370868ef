"""
Term-frequency keywords, overall and per sentiment label.
Each label's list is counted from that label's reviews alone, not sliced out of
the overall counts.
"""
from __future__ import annotations
import re
from collections import Counter
from typing import List, Optional, Sequence

from .config import CFG
from .schemas import LABELS, KeywordAnalysis, KeywordEntry, ScoredReview

_NON_WORD_RE = re.compile(r"[^\w\s]", re.ASCII)
_NUMERIC_RE = re.compile(r"\d+", re.ASCII)

STOPWORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "will", "with", "i", "you", "we", "they", "this",
    "these", "those", "my", "your", "our", "their", "me", "him",
    "her", "us", "them", "am", "were", "been",
    "being", "have", "had", "having", "do", "does", "did",
    "doing", "can", "could", "should", "would", "may", "might",
    "must", "shall", "very", "really", "quite", "just",
    "only", "also", "even", "still", "already", "yet", "not",
    "no", "yes", "but", "however", "although", "though", "because",
    "since", "if", "when", "where", "why", "how", "what", "which",
    "who", "whom", "whose", "all", "any", "both", "each", "few",
    "more", "most", "other", "some", "such", "nor",
    "too", "so", "up", "down", "out", "off", "over", "under",
    "again", "further", "then", "once", "here", "there",
})


def extract_keywords(text) -> List[str]:
    if not isinstance(text, str) or not text:
        return []
    words = _NON_WORD_RE.sub(" ", text.lower()).split()
    return [
        w for w in words
        if len(w) > 2 and w not in STOPWORDS and not _NUMERIC_RE.fullmatch(w)
    ]


def get_top_keywords(reviews: Sequence[ScoredReview], limit: int = 10) -> List[KeywordEntry]:
    """
    Most frequent terms across the reviews' original text.
    Ties keep first-seen order (Counter preserves insertion order and
    most_common sorts stably).
    """
    counts: Counter = Counter()
    for r in reviews:
        counts.update(extract_keywords(r.text))
    return [KeywordEntry(term=t, count=c) for t, c in counts.most_common(limit)]


def keywords_by_sentiment(reviews: Sequence[ScoredReview], label: str, limit: Optional[int] = None) -> List[KeywordEntry]:
    limit = CFG.top_keywords_by_sentiment if limit is None else limit
    return get_top_keywords([r for r in reviews if r.label == label], limit)


def analyze_keywords(reviews: Sequence[ScoredReview]) -> KeywordAnalysis:
    return KeywordAnalysis(
        overall=get_top_keywords(reviews, CFG.top_keywords_overall),
        by_sentiment={lab: keywords_by_sentiment(reviews, lab) for lab in LABELS},
    )
