#!/usr/bin/env python3
"""
Script to print the contents of the Cantonese vocabulary database.

Usage: python check_database.py [--db path]
"""

import sys
import os
import argparse

# Add the current directory to the path so we can import our modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from llm_learn_cantonese import db
from llm_learn_cantonese.errors import StoreUnavailable


def check_database_contents(store: db.VocabularyStore) -> None:
    """Print every word, alphabetical, with its practice state."""
    print(f"📚 Opening database: {store.db_path}")
    words = store.list_all()

    print(f"\n📊 Total words in database: {len(words)}\n")
    print("─" * 100)
    print(f"{'English':<35} {'Jyutping':<35} {'Last Practiced':<15} {'Level':>6}")
    print("─" * 100)
    for word in words:
        print(f"{word.english[:34]:<35} {word.cantonese_jyutping[:34]:<35} "
              f"{word.last_practiced_date.isoformat():<15} {word.level:>6}")
    print("─" * 100)
    print(f"\n✅ Displayed {len(words)} words\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="View the vocabulary database")
    parser.add_argument("--db", default=db.DB_PATH, help="SQLite database path")
    args = parser.parse_args()

    if not os.path.exists(args.db):
        print(f"❌ Database file '{args.db}' not found!")
        print("   Make sure you're running this from the correct directory.")
        sys.exit(1)

    try:
        with db.VocabularyStore(args.db) as store:
            check_database_contents(store)
    except StoreUnavailable as e:
        print(f"❌ Error examining database: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
