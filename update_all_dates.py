#!/usr/bin/env python3
"""Reset every word's last practiced date to today.

Usage: python update_all_dates.py [--db path]
"""
import sys, os, argparse
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from llm_learn_cantonese import db


def main() -> None:
    parser = argparse.ArgumentParser(description="Set all last practiced dates to today")
    parser.add_argument("--db", default=db.DB_PATH, help="SQLite database path")
    args = parser.parse_args()

    today = db.today()
    print(f"📅 Updating all words to last_practiced_date: {today.isoformat()}")
    with db.VocabularyStore(args.db) as store:
        changed = store.set_all_dates(today)
    print(f"✅ Updated {changed} words to today's date ({today.isoformat()})")


if __name__ == "__main__":
    main()
