from __future__ import annotations
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    # ingestion
    max_csv_rows: int = int(os.getenv("MAX_CSV_ROWS", 10_000))
    csv_chunk_rows: int = int(os.getenv("CSV_CHUNK_ROWS", 5_000))

    # scoring
    progress_batch_size: int = int(os.getenv("PROGRESS_BATCH_SIZE", 1_000))
    show_progress: bool = _flag("SHOW_PROGRESS")

    # keywords / trends
    top_keywords_overall: int = int(os.getenv("TOP_KEYWORDS_OVERALL", 15))
    top_keywords_by_sentiment: int = int(os.getenv("TOP_KEYWORDS_BY_SENTIMENT", 5))
    trend_max_points: int = int(os.getenv("TREND_MAX_POINTS", 100))

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

CFG = Settings()
