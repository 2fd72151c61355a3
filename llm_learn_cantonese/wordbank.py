"""CSV word banks: import into the store, and build them from exported deck JSON."""

import csv
import datetime
import glob
import json
import os
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from .db import DEBUG_MODE, VocabularyStore, today
from .errors import DuplicateKey

ENGLISH_HEADERS = {"english"}
JYUTPING_HEADERS = {"jyutping", "cantonese_jyutping"}


@dataclass
class WordRow:
    english: str
    cantonese_jyutping: str


@dataclass
class SkippedRow:
    english: str
    reason: str


@dataclass
class ImportResult:
    added: List[WordRow] = field(default_factory=list)
    skipped: List[SkippedRow] = field(default_factory=list)
    errors: int = 0
    existing: int = 0

    @property
    def total(self) -> int:
        return self.existing + len(self.added)


def _column_indices(header: List[str]) -> Tuple[int, int, bool]:
    """Return (english_idx, jyutping_idx, has_header) for the first CSV row."""
    english_idx = jyutping_idx = -1
    for i, name in enumerate(header):
        name = name.strip().lower()
        if name in ENGLISH_HEADERS:
            english_idx = i
        elif name in JYUTPING_HEADERS:
            jyutping_idx = i
    if english_idx >= 0 and jyutping_idx >= 0:
        return english_idx, jyutping_idx, True
    return 0, 1, False


def read_word_rows(lines: Iterable[str]) -> Tuple[List[WordRow], List[SkippedRow]]:
    """Parse CSV text into word rows.

    The header may name ``english`` and ``jyutping``/``cantonese_jyutping``
    columns in any order; without a recognisable header the first column is
    English and the second jyutping. Rows missing either field are skipped.
    """
    rows = [r for r in csv.reader(line for line in lines if line.strip())]
    if not rows:
        return [], []

    english_idx, jyutping_idx, has_header = _column_indices(rows[0])
    if not has_header and DEBUG_MODE:
        print("⚠️  Could not detect column headers, assuming: Column 0 = English, Column 1 = Jyutping")

    words: List[WordRow] = []
    skipped: List[SkippedRow] = []
    for fields in rows[1:] if has_header else rows:
        if len(fields) < 2:
            skipped.append(SkippedRow(",".join(fields), "Invalid format (less than 2 fields)"))
            continue
        english = fields[english_idx].strip() if english_idx < len(fields) else ""
        jyutping = fields[jyutping_idx].strip() if jyutping_idx < len(fields) else ""
        if not english or not jyutping:
            skipped.append(SkippedRow(english or ",".join(fields), "Missing english or jyutping"))
            continue
        words.append(WordRow(english, jyutping))
    return words, skipped


def import_words_csv(store: VocabularyStore, csv_path: str,
                     practiced_on: Optional[datetime.date] = None,
                     reset: bool = False) -> ImportResult:
    """Add every new word from ``csv_path``. Existing keys are skipped case-insensitively.

    With ``reset`` the table is emptied first, so the CSV becomes the whole word list.
    The file is parsed before anything is deleted.
    """
    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        rows, skipped = read_word_rows(f)

    if reset:
        removed = store.clear()
        print(f"🗑️  Cleared {removed} existing words")

    existing = {w.english.strip().lower() for w in store.list_all()}
    result = ImportResult(skipped=skipped, existing=len(existing))
    practiced_on = practiced_on or today()

    for row in rows:
        key = row.english.lower()
        if key in existing:
            result.skipped.append(SkippedRow(row.english, "Already exists in database"))
            continue
        try:
            store.insert(row.english, row.cantonese_jyutping, practiced_on=practiced_on)
        except DuplicateKey:
            result.skipped.append(SkippedRow(row.english, "Duplicate key"))
            continue
        except SQLAlchemyError as e:
            print(f"❌ Error inserting \"{row.english}\": {e}")
            result.errors += 1
            continue
        existing.add(key)
        result.added.append(row)

    return result


def extract_decks_to_csv(input_dir: str, output_path: str) -> int:
    """Write ``english,cantonese_jyutping`` rows from every deck JSON in ``input_dir``.

    Deck files look like ``{"name": ..., "cards": [{"frontText": ..., "backText": ...}]}``.
    Returns the number of rows written.
    """
    json_files = sorted(glob.glob(os.path.join(input_dir, "*.json")))
    print(f"Found {len(json_files)} JSON files\n")

    rows: List[WordRow] = []
    for path in json_files:
        name = os.path.basename(path)
        print(f"Processing {name}...")
        with open(path, "r", encoding="utf-8") as f:
            deck = json.load(f)

        cards = deck.get("cards") if isinstance(deck, dict) else None
        if not isinstance(cards, list):
            print(f"  ⚠️  Skipping {name}: No cards array found\n")
            continue

        extracted = 0
        for card in cards:
            english = (card.get("frontText") or "").strip()
            jyutping = (card.get("backText") or "").strip()
            if not english or not jyutping:
                continue
            rows.append(WordRow(english, jyutping))
            extracted += 1
        print(f"  ✅ Extracted {extracted} cards\n")

    output_dir = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(output_dir, exist_ok=True)
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(["english", "cantonese_jyutping"])
        for row in rows:
            writer.writerow([row.english, row.cantonese_jyutping])
    return len(rows)
