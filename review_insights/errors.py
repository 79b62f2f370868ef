"""Errors raised by the review analysis pipeline."""


class ReviewInsightsError(Exception):
    """Base class for every error the pipeline reports to its caller."""


class UnsupportedFileType(ReviewInsightsError):
    """The upload's extension is neither .csv nor .json."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Only CSV and JSON files are allowed (got {extension or 'no extension'!r})")


class ParseError(ReviewInsightsError):
    """Malformed CSV/JSON, or no rows survived required-field filtering."""


class NoPriorResult(ReviewInsightsError, LookupError):
    def __init__(self):
        super().__init__("No analysis data available. Please upload a file first.")
