from __future__ import annotations
from sqlalchemy import create_engine, CheckConstraint, Date, Integer, String, func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session, Mapped, mapped_column
import datetime
import os
from typing import Optional, List, Any, Dict

from .errors import DuplicateKey, InvalidInput, StoreUnavailable

DEBUG_MODE = os.getenv("DEBUG", "0") == "1"

DB_PATH: str = os.environ.get("LLM_CANTO_DB", os.path.join("data", "vocabulary.db"))

ORDER_ALPHABETICAL = "alphabetical"
ORDER_LEAST_RECENT = "least_recent"
ORDER_RANDOM = "random"
ORDERINGS = (ORDER_ALPHABETICAL, ORDER_LEAST_RECENT, ORDER_RANDOM)


class Base(DeclarativeBase):
    pass


def today() -> datetime.date:
    return datetime.date.today()


class Word(Base):
    __tablename__ = "words"
    __table_args__ = (
        CheckConstraint("proficiency_level >= 1", name="ck_words_proficiency_floor"),
    )
    english: Mapped[str] = mapped_column(String, primary_key=True)
    cantonese_jyutping: Mapped[str] = mapped_column(String, nullable=False)
    last_practiced_date: Mapped[datetime.date] = mapped_column(Date, nullable=False, default=today)
    proficiency_level: Mapped[Optional[int]] = mapped_column(Integer, default=1)

    @property
    def level(self) -> int:
        """Proficiency level, treating a NULL column as the floor."""
        return self.proficiency_level if self.proficiency_level is not None else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "english": self.english,
            "cantonese_jyutping": self.cantonese_jyutping,
            "last_practiced_date": self.last_practiced_date.isoformat(),
            "proficiency_level": self.level,
        }

    def __repr__(self) -> str:
        return f"<Word {self.english!r} ({self.cantonese_jyutping}) level={self.level}>"


class VocabularyStore:
    """Owns the SQLite engine backing the ``words`` table.

    A store is created closed; ``init()`` opens the engine (creating the
    parent directory and the table if needed) and ``close()`` disposes it.
    Query and progress components receive the store in their constructors
    and open a short-lived session per call, so the file stays the source of
    truth for every read.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path: str = db_path or DB_PATH
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker[Session]] = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def init(self) -> "VocabularyStore":
        """Open the database and create the schema. Safe to call repeatedly."""
        if self.engine is not None:
            return self
        try:
            directory = os.path.dirname(os.path.abspath(self.db_path))
            os.makedirs(directory, exist_ok=True)
            engine = create_engine(f"sqlite:///{self.db_path}")
            Base.metadata.create_all(bind=engine)
        except (OSError, SQLAlchemyError) as e:
            raise StoreUnavailable(f"Could not open vocabulary database at {self.db_path}: {e}") from e

        self.engine = engine
        # Keep returned Word objects readable after the session closes
        self.SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
        if DEBUG_MODE:
            print(f"📚 Vocabulary database ready: {self.db_path}")
        return self

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None

    def __enter__(self) -> "VocabularyStore":
        return self.init()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_session(self) -> Session:
        if self.SessionLocal is None:
            raise StoreUnavailable(f"Vocabulary database {self.db_path} is not open; call init() first.")
        return self.SessionLocal()

    def insert(self, english: str, cantonese_jyutping: str,
               practiced_on: Optional[datetime.date] = None,
               proficiency_level: int = 1) -> Word:
        """Create a word. Raises DuplicateKey if ``english`` is already stored."""
        if not isinstance(english, str) or not english.strip():
            raise InvalidInput("english must be a non-empty string.")
        if not isinstance(cantonese_jyutping, str) or not cantonese_jyutping.strip():
            raise InvalidInput(f'cantonese_jyutping for "{english}" must be a non-empty string.', word=english)
        if proficiency_level < 1:
            raise InvalidInput(f"proficiency_level must be at least 1, got {proficiency_level}.", word=english)

        word = Word(
            english=english,
            cantonese_jyutping=cantonese_jyutping,
            last_practiced_date=practiced_on or today(),
            proficiency_level=proficiency_level,
        )
        session: Session = self.get_session()
        try:
            session.add(word)
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise DuplicateKey(f'Word "{english}" already exists in the database.', word=english) from e
        finally:
            session.close()
        return word

    def get_by_key(self, english: str) -> Optional[Word]:
        session: Session = self.get_session()
        try:
            return session.get(Word, english)
        finally:
            session.close()

    def update_progress(self, english: str, practiced_on: datetime.date,
                        proficiency_level: int) -> Optional[Word]:
        """Overwrite date and level of one word. Returns None if the key is absent."""
        if proficiency_level < 1:
            raise InvalidInput(f"proficiency_level must be at least 1, got {proficiency_level}.", word=english)
        session: Session = self.get_session()
        try:
            word = session.get(Word, english)
            if word is None:
                return None
            word.last_practiced_date = practiced_on
            word.proficiency_level = proficiency_level
            session.commit()
            return word
        finally:
            session.close()

    def delete(self, english: str) -> Optional[Word]:
        """Delete by exact key and return the removed word, or None."""
        session: Session = self.get_session()
        try:
            word = session.get(Word, english)
            if word is None:
                return None
            session.delete(word)
            session.commit()
            return word
        finally:
            session.close()

    def list_all(self, order_by: str = ORDER_ALPHABETICAL) -> List[Word]:
        if order_by == ORDER_ALPHABETICAL:
            ordering = [Word.english.asc()]
        elif order_by == ORDER_LEAST_RECENT:
            ordering = [Word.last_practiced_date.asc(), func.random()]
        elif order_by == ORDER_RANDOM:
            ordering = [func.random()]
        else:
            raise InvalidInput(f"Unknown ordering {order_by!r}; expected one of {', '.join(ORDERINGS)}.")

        session: Session = self.get_session()
        try:
            return session.query(Word).order_by(*ordering).all()
        finally:
            session.close()

    def count(self) -> int:
        session: Session = self.get_session()
        try:
            return session.query(Word).count()
        finally:
            session.close()

    def set_all_dates(self, practiced_on: Optional[datetime.date] = None) -> int:
        """Set every word's last practiced date. Returns the number of rows changed."""
        session: Session = self.get_session()
        try:
            changed = session.query(Word).update(
                {Word.last_practiced_date: practiced_on or today()},
                synchronize_session=False,
            )
            session.commit()
            return changed
        finally:
            session.close()

    def clear(self) -> int:
        """Delete every word. Returns the number of rows removed."""
        session: Session = self.get_session()
        try:
            removed = session.query(Word).delete(synchronize_session=False)
            session.commit()
            return removed
        finally:
            session.close()
