from typing import Any, Optional

import click
import llm  # type: ignore

from .db import VocabularyStore
from .errors import DuplicateKey
from .matcher import find_word
from .queries import VocabularyQueries
from .wordbank import import_words_csv

db_option = click.option("--db", "db_path", default=None, help="SQLite file (default: $LLM_CANTO_DB)")


def _open_store(db_path: Optional[str]) -> VocabularyStore:
    return VocabularyStore(db_path).init()


@llm.hookimpl  # type: ignore[misc]
def register_commands(cli: Any) -> None:

    @cli.command("canto-init-db")  # type: ignore[misc]
    @db_option
    def init_db(db_path: Optional[str]) -> None:
        """Initialize the Cantonese vocabulary database."""
        store = _open_store(db_path)
        click.echo(f"Database initialized at {store.db_path}.")
        store.close()

    @cli.command("canto-add-word")  # type: ignore[misc]
    @click.argument("english")
    @click.argument("jyutping")
    @db_option
    def add_word(english: str, jyutping: str, db_path: Optional[str]) -> None:
        """Add a word with proficiency 1 and today's date."""
        with _open_store(db_path) as store:
            try:
                store.insert(english, jyutping)
                click.echo(f"Word '{english}' ({jyutping}) added.")
            except DuplicateKey:
                click.echo(f"Word '{english}' already exists (skipped).")

    @cli.command("canto-remove-word")  # type: ignore[misc]
    @click.argument("word")
    @db_option
    def remove_word(word: str, db_path: Optional[str]) -> None:
        """Remove a word, matched by English or jyutping."""
        with _open_store(db_path) as store:
            english = find_word(store, word)
            removed = store.delete(english) if english is not None else None
            if removed is None:
                raise click.ClickException(f"Word '{word}' not found.")
            click.echo(f"Word '{removed.english}' ({removed.cantonese_jyutping}) removed.")

    @cli.command("canto-import-csv")  # type: ignore[misc]
    @click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
    @click.option("--reset", is_flag=True, help="Delete every stored word before importing")
    @db_option
    def import_csv(csv_path: str, reset: bool, db_path: Optional[str]) -> None:
        """Add new words from a CSV word bank (english,jyutping)."""
        with _open_store(db_path) as store:
            result = import_words_csv(store, csv_path, reset=reset)
        click.echo(f"Added {len(result.added)} new words, skipped {len(result.skipped)}.")

    @cli.command("canto-export")  # type: ignore[misc]
    @db_option
    def export(db_path: Optional[str]) -> None:
        """Print every word as 'english, jyutping'."""
        with _open_store(db_path) as store:
            click.echo(VocabularyQueries(store).export_text())

    @cli.command("canto-update-dates")  # type: ignore[misc]
    @db_option
    def update_dates(db_path: Optional[str]) -> None:
        """Set every word's last practiced date to today."""
        with _open_store(db_path) as store:
            changed = store.set_all_dates()
        click.echo(f"Updated {changed} words to today's date.")
