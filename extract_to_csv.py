#!/usr/bin/env python3
"""Build a CSV word bank from exported flashcard deck JSON files.

Usage: python extract_to_csv.py [--input dir] [--output path]
"""
import sys, os, argparse
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from llm_learn_cantonese.wordbank import extract_decks_to_csv


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract deck JSON files to a word bank CSV")
    parser.add_argument("--input", default="data/decks", help="Directory of deck .json files")
    parser.add_argument("--output", default="data/words.csv")
    args = parser.parse_args()

    if not os.path.isdir(args.input):
        print(f"❌ Deck directory not found: {args.input}"); sys.exit(1)

    print("Extracting data from JSON files...\n")
    count = extract_decks_to_csv(args.input, args.output)
    print(f"📊 Wrote {count} words to {args.output}")


if __name__ == "__main__":
    main()
