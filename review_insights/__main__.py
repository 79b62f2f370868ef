"""Analyze a review file from the command line: python -m review_insights reviews.csv"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

from .config import CFG
from .errors import ReviewInsightsError
from .pipeline import analyze_file
from .trends import compare_periods, daily_trends


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog="review_insights", description=__doc__)
    ap.add_argument("file", help="CSV or JSON review dataset")
    ap.add_argument("--out", help="write the full result JSON here")
    ap.add_argument("--trends", action="store_true", help="also print daily trends and the period shift")
    args = ap.parse_args(argv)

    logging.basicConfig(level=CFG.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        result = analyze_file(args.file)
    except (ReviewInsightsError, OSError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    if args.out:
        Path(args.out).write_text(result.model_dump_json(indent=2))
        print(f"[info] saved {args.out}")
    else:
        print(json.dumps({
            "file_info": result.file_info.model_dump(),
            "summary": result.summary.model_dump(),
            "keywords": result.keywords.model_dump(),
        }, indent=2))

    if args.trends:
        points = daily_trends(result.reviews)
        print(json.dumps({
            "daily": [p.model_dump() for p in points],
            "shift": compare_periods(result.reviews).model_dump(),
        }, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
