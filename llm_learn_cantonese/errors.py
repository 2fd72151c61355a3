"""Error types raised by the vocabulary store and tool layer."""

from typing import Optional


class VocabularyError(Exception):
    """Base class for vocabulary errors. ``code`` is reported in tool results."""

    code: str = "VocabularyError"

    def __init__(self, message: str, word: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.word = word


class DuplicateKey(VocabularyError):
    """An insert used an ``english`` key that is already stored."""

    code = "DuplicateKey"


class WordNotFound(VocabularyError):
    """The matcher could not resolve a query to a stored word."""

    code = "WordNotFound"


class InvalidInput(VocabularyError):
    """A required field was missing or empty."""

    code = "InvalidInput"


class StoreUnavailable(VocabularyError):
    """The SQLite file could not be opened or initialized."""

    code = "StoreUnavailable"
