from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from .db import DEBUG_MODE, VocabularyStore, Word, today
from .errors import InvalidInput, WordNotFound
from .matcher import find_word


def next_level(level: Optional[int], success: bool) -> int:
    """+1 on success, -1 on failure, never below 1."""
    current = level if level is not None else 1
    return current + 1 if success else max(current - 1, 1)


@dataclass
class FailedUpdate:
    query: str
    reason: str
    code: str = WordNotFound.code

    def to_dict(self) -> Dict[str, Any]:
        return {"english": self.query, "reason": self.reason, "error": self.code}


@dataclass
class BatchResult:
    updated: List[Word] = field(default_factory=list)
    failed: List[FailedUpdate] = field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return len(self.updated)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def success(self) -> bool:
        return self.succeeded_count > 0

    @property
    def message(self) -> str:
        message = f"Updated {self.succeeded_count} word(s)."
        if self.failed:
            message += f" {self.failed_count} word(s) failed to update."
        return message


class ProgressUpdater:
    """Apply practice outcomes word by word.

    Each entry commits on its own; a blank, unresolvable or failing entry is
    recorded in ``BatchResult.failed`` and the rest of the batch continues.
    """

    def __init__(self, store: VocabularyStore) -> None:
        self.store = store

    def record(self, query: str, success: bool) -> Word:
        """Resolve ``query`` and apply one outcome dated today.

        Raises InvalidInput for a blank query and WordNotFound when nothing matches.
        """
        if not query or not query.strip():
            raise InvalidInput("Either english or cantonese_jyutping must be a non-empty string.")

        english = find_word(self.store, query)
        if english is None:
            raise WordNotFound(
                f'Word not found in database. Searched for "{query}" as both English and '
                f'Cantonese, including variations like "I/my" vs "I / my".',
                word=query,
            )

        current = self.store.get_by_key(english)
        if current is None:
            raise WordNotFound(f'Matched "{query}" to "{english}" but the word could not be read back.', word=query)

        updated = self.store.update_progress(english, today(), next_level(current.proficiency_level, success))
        if updated is None:
            raise WordNotFound(f'Word "{english}" was removed before it could be updated.', word=query)

        if DEBUG_MODE:
            match_note = f' (matched "{query}" to "{english}")' if english != query else ""
            print(f"✅ Updated word \"{english}\"{match_note}: proficiency={updated.level}")
        return updated

    def apply(self, entries: Iterable[Tuple[str, bool]]) -> BatchResult:
        result = BatchResult()
        for query, success in entries:
            try:
                result.updated.append(self.record(query, success))
            except (InvalidInput, WordNotFound) as e:
                result.failed.append(FailedUpdate(query=query, reason=e.message, code=e.code))
                if DEBUG_MODE:
                    print(f"❌ {e.message}")
            except SQLAlchemyError as e:
                result.failed.append(FailedUpdate(query=query, reason=str(e), code="DatabaseError"))
                print(f"❌ Error updating word \"{query}\": {e}")

        if DEBUG_MODE:
            print(f"📊 Batch update complete: {result.succeeded_count} succeeded, {result.failed_count} failed")
        return result
