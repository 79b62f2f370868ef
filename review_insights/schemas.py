from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional

Label = Literal["positive", "negative", "neutral"]
LABELS = ("positive", "negative", "neutral")


class RawReview(BaseModel):
    review_id: str
    review_text: str
    rating: int = 0
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    user_id: Optional[str] = None
    profile_name: Optional[str] = None
    review_date: Optional[str] = None  # ISO-8601; epoch seconds -> ISO for the extended CSV layout
    date: Optional[str] = None  # passed through untouched when the source supplies it
    summary: Optional[str] = None
    helpfulness_numerator: int = 0
    helpfulness_denominator: int = 0


class ScoredReview(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    cleaned_text: str
    score: float  # summed word polarity
    label: Label
    confidence: float = Field(ge=0.0, le=1.0)
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    rating: int = 0
    date: Optional[str] = None
    review_date: Optional[str] = None


class SentimentBucket(BaseModel):
    count: int
    percentage: int


class ScoreRange(BaseModel):
    min: Optional[float] = None  # None when there are no reviews
    max: Optional[float] = None


class AnalysisSummary(BaseModel):
    total_reviews: int
    sentiment_distribution: Dict[str, SentimentBucket]
    average_score: float
    score_range: ScoreRange


class KeywordEntry(BaseModel):
    term: str
    count: int


class KeywordAnalysis(BaseModel):
    overall: List[KeywordEntry]
    by_sentiment: Dict[str, List[KeywordEntry]]


class FileInfo(BaseModel):
    original_name: str
    size: int
    type: str  # ".csv" | ".json"


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_info: FileInfo
    summary: AnalysisSummary
    reviews: List[ScoredReview]
    keywords: KeywordAnalysis


class TrendPoint(BaseModel):
    date: str  # YYYY-MM-DD
    positive: int
    neutral: int
    negative: int
    avg_sentiment: float


class PeriodStats(BaseModel):
    positive: float  # percentages, one decimal
    negative: float
    neutral: float
    avg_score: float


class TrendShift(BaseModel):
    earlier: PeriodStats
    later: PeriodStats
    changes: PeriodStats
