#!/usr/bin/env python3
"""Add new words from a CSV word bank into the database.

Rows whose English text is already stored (case-insensitive) are skipped.
With --reset the table is emptied first and reseeded from the CSV.
Usage: python import_words.py [--csv path] [--db path] [--reset]
"""
import sys, os, argparse
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from llm_learn_cantonese import db
from llm_learn_cantonese.wordbank import import_words_csv


def main() -> None:
    parser = argparse.ArgumentParser(description="Import a Cantonese word bank CSV")
    parser.add_argument("--csv", default="data/words.csv")
    parser.add_argument("--db", default=db.DB_PATH, help="SQLite database path")
    parser.add_argument("--reset", action="store_true",
                        help="Delete every stored word before importing (reseed from the CSV)")
    args = parser.parse_args()

    if not os.path.exists(args.csv):
        print(f"❌ CSV file not found: {args.csv}"); sys.exit(1)

    print(f"📖 Reading words from: {args.csv}")
    with db.VocabularyStore(args.db) as store:
        result = import_words_csv(store, args.csv, reset=args.reset)
        total = store.count()

    print("\n" + "=" * 60)
    print("📊 Summary:")
    print("=" * 60)
    print(f"✅ Added: {len(result.added)} new words")
    print(f"⏭️  Skipped: {len(result.skipped)} words (already exist or invalid)")
    if result.errors:
        print(f"❌ Errors: {result.errors} words")

    if 0 < len(result.skipped) <= 20:
        print("\n⏭️  Skipped words:")
        for skipped in result.skipped:
            print(f"   - \"{skipped.english}\" ({skipped.reason})")
    elif len(result.skipped) > 20:
        print(f"\n⏭️  Skipped {len(result.skipped)} words (too many to display)")

    print(f"\n📚 Total words in database: {total}")
    print("=" * 60)


if __name__ == "__main__":
    main()
