#!/usr/bin/env python3
"""
Run the nightly summary generation once, outside the scheduler.

Generates today's summary for every user who wrote an entry yesterday.
Users that already have today's summary are left untouched.

Usage:
    python scripts/generate_daily_summaries.py
"""
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

import logging

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

from journal_insights.background_jobs import daily_summary_job


def main():
    stats = daily_summary_job()
    if stats is None:
        print("Daily summary generation failed; see log output.")
        sys.exit(1)

    print(f"Date: {stats['date']}")
    print(f"Users with entries yesterday: {stats['users']}")
    print(f"Summaries generated or already present: {stats['generated']}")
    print(f"Skipped (nothing to summarize or NLP failure): {stats['skipped']}")
    for error in stats["errors"]:
        print(f"  ✗ {error}")

    sys.exit(1 if stats["errors"] else 0)


if __name__ == "__main__":
    main()
