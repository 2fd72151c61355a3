import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from .db import VocabularyStore, Word, ORDER_ALPHABETICAL, ORDER_LEAST_RECENT, today

SRS_REVIEW = "srs_review"
GENERAL_REVIEW = "general_review"
PRACTICE_MODES = (SRS_REVIEW, GENERAL_REVIEW)

RANDOM_SAMPLE_SIZE = 50


class VocabularyQueries:
    """Read-only selections over the vocabulary store. Empty tables give empty results."""

    def __init__(self, store: VocabularyStore) -> None:
        self.store = store

    def full_review(self) -> List[Word]:
        """All words, least recently practiced first, shuffled among equal dates."""
        return self.store.list_all(order_by=ORDER_LEAST_RECENT)

    def due_for_review(self, on: Optional[datetime.date] = None) -> List[Word]:
        """Words whose last practice date is on or before ``on`` (default today)."""
        cutoff = on or today()
        session: Session = self.store.get_session()
        try:
            return (session.query(Word)
                    .filter(Word.last_practiced_date <= cutoff)
                    .order_by(Word.last_practiced_date.asc())
                    .all())
        finally:
            session.close()

    def words_for_practice(self, mode: str = GENERAL_REVIEW,
                           on: Optional[datetime.date] = None) -> List[Word]:
        if mode == SRS_REVIEW:
            return self.due_for_review(on)
        return self.full_review()

    def random_sample(self, size: int = RANDOM_SAMPLE_SIZE) -> List[Word]:
        """Up to ``size`` distinct words chosen uniformly at random."""
        session: Session = self.store.get_session()
        try:
            return session.query(Word).order_by(func.random()).limit(size).all()
        finally:
            session.close()

    def least_proficient(self) -> Optional[Word]:
        """The lowest-level word; the oldest practice date wins a tie."""
        session: Session = self.store.get_session()
        try:
            return (session.query(Word)
                    .order_by(func.coalesce(Word.proficiency_level, 1).asc(),
                              Word.last_practiced_date.asc())
                    .first())
        finally:
            session.close()

    def lowest_proficiency(self) -> Tuple[List[Word], Optional[int]]:
        """Every word tied at the minimum level, plus that level (None if empty)."""
        level = func.coalesce(Word.proficiency_level, 1)
        session: Session = self.store.get_session()
        try:
            min_level = session.query(func.min(level)).scalar()
            if min_level is None:
                return [], None
            words = (session.query(Word)
                     .filter(level == min_level)
                     .order_by(Word.last_practiced_date.asc())
                     .all())
            return words, min_level
        finally:
            session.close()

    def export_text(self) -> str:
        """One ``"english, jyutping"`` line per word, alphabetical."""
        words = self.store.list_all(order_by=ORDER_ALPHABETICAL)
        return "\n".join(f"{w.english}, {w.cantonese_jyutping}" for w in words)
