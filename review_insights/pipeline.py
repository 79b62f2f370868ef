"""
End-to-end analysis of one uploaded file:
parse -> score -> aggregate -> keywords, then remember the result as the latest.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, Optional

from .errors import NoPriorResult, UnsupportedFileType
from .ingest import SUPPORTED_EXTENSIONS, normalize_extension, parse_upload
from .keywords import analyze_keywords
from .schemas import AnalysisResult, FileInfo
from .sentiment import Lexicon, Progress, process_reviews

logger = logging.getLogger(__name__)


class LatestResultStore:
    """
    Holds the most recent successful AnalysisResult for the life of the process.

    Writes replace the whole object in one assignment, so a concurrent reader sees
    either the old result or the new one, never a mix. Last writer wins; no lock.
    """

    def __init__(self):
        self._result: Optional[AnalysisResult] = None

    def set(self, result: AnalysisResult) -> None:
        self._result = result

    def get(self) -> Optional[AnalysisResult]:
        return self._result

    def require(self) -> AnalysisResult:
        result = self._result
        if result is None:
            raise NoPriorResult()
        return result

    def clear(self) -> None:
        self._result = None


LATEST = LatestResultStore()


def get_latest_analysis(store: LatestResultStore = LATEST) -> AnalysisResult:
    return store.require()


def analyze_upload(
    data: bytes,
    filename: str,
    progress_callback: Optional[Callable[[Progress], None]] = None,
    lexicon: Optional[Lexicon] = None,
    store: LatestResultStore = LATEST,
) -> AnalysisResult:
    ext = normalize_extension(Path(filename).suffix)
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileType(ext)

    logger.info("analyzing %s (%d bytes)", filename, len(data))
    raw = parse_upload(data, ext)

    scored = process_reviews(raw, progress_callback=progress_callback, lexicon=lexicon)
    logger.info("sentiment analysis complete for %d reviews", len(scored.reviews))

    keywords = analyze_keywords(scored.reviews)
    logger.info("keyword extraction complete")

    result = AnalysisResult(
        file_info=FileInfo(original_name=filename, size=len(data), type=ext),
        summary=scored.summary,
        reviews=scored.reviews,
        keywords=keywords,
    )
    store.set(result)
    return result


def analyze_file(path, **kwargs) -> AnalysisResult:
    p = Path(path)
    return analyze_upload(p.read_bytes(), p.name, **kwargs)
