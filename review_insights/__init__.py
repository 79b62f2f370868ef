from .errors import NoPriorResult, ParseError, ReviewInsightsError, UnsupportedFileType
from .pipeline import LATEST, LatestResultStore, analyze_file, analyze_upload, get_latest_analysis
