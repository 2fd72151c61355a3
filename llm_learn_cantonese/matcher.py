"""Resolve free text from the user or the model to a stored ``english`` key.

Lookup order, first hit wins:

1. case-insensitive, trimmed equality with ``english``
2. case-insensitive, trimmed equality with ``cantonese_jyutping``
3. equality after :func:`normalize_word` on either column
4. equality with any ``/``-separated part of the normalized jyutping
   (entries such as ``"sik6 coeng2 / zaap6 fo3 pou3"``)

Steps 1-2 run in SQL; steps 3-4 scan the whole table, which is fine for
vocabulary lists of a few thousand words.
"""

import re
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .db import DEBUG_MODE, VocabularyStore, Word

_SLASH_RE = re.compile(r"\s*/\s*")
_SPACE_RE = re.compile(r"\s+")


def normalize_word(word: Any) -> str:
    """Lowercase, trim, collapse whitespace and tighten slashes ("I / my" -> "i/my")."""
    if not word or not isinstance(word, str):
        return ""
    normalized = word.strip().lower()
    normalized = _SLASH_RE.sub("/", normalized)
    normalized = _SPACE_RE.sub(" ", normalized)
    return normalized.strip()


def _exact_match(session: Session, column: Any, search_term: str) -> Optional[str]:
    row = (session.query(Word.english)
           .filter(func.lower(func.trim(column)) == search_term.strip().lower())
           .first())
    return row[0] if row else None


def find_word(store: VocabularyStore, search_term: Any) -> Optional[str]:
    """Return the stored ``english`` value matching ``search_term``, or None."""
    normalized_search = normalize_word(search_term)
    if not normalized_search:
        return None

    session: Session = store.get_session()
    try:
        match = _exact_match(session, Word.english, search_term)
        if match is None:
            match = _exact_match(session, Word.cantonese_jyutping, search_term)
        if match is not None:
            return match

        for english, jyutping in session.query(Word.english, Word.cantonese_jyutping).all():
            if normalize_word(english) == normalized_search:
                return english
            normalized_jyutping = normalize_word(jyutping)
            if normalized_jyutping == normalized_search:
                return english
            if normalized_search in normalized_jyutping.split("/"):
                return english
    finally:
        session.close()

    if DEBUG_MODE:
        print(f"❌ No word matches {search_term!r} (tried english, jyutping and normalized forms)")
    return None
