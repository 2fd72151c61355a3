"""
Tests for the read-only practice selections.
"""

import datetime
from typing import Generator

import pytest

from llm_learn_cantonese.db import VocabularyStore, Word
from llm_learn_cantonese.queries import VocabularyQueries, SRS_REVIEW, GENERAL_REVIEW

TODAY = datetime.date.today()
YESTERDAY = TODAY - datetime.timedelta(days=1)
TOMORROW = TODAY + datetime.timedelta(days=1)


@pytest.fixture
def store(tmp_path) -> Generator[VocabularyStore, None, None]:
    s = VocabularyStore(str(tmp_path / "test_queries.db")).init()
    yield s
    s.close()


@pytest.fixture
def queries(store: VocabularyStore) -> VocabularyQueries:
    return VocabularyQueries(store)


def test_empty_store_gives_empty_results(queries: VocabularyQueries) -> None:
    assert queries.full_review() == []
    assert queries.due_for_review() == []
    assert queries.random_sample() == []
    assert queries.least_proficient() is None
    assert queries.lowest_proficiency() == ([], None)
    assert queries.export_text() == ""


def test_full_review_oldest_first(store: VocabularyStore, queries: VocabularyQueries) -> None:
    store.insert("new", "san1", practiced_on=TODAY)
    store.insert("old", "gau6", practiced_on=datetime.date(2023, 1, 1))
    store.insert("middle", "zung1 gaan1", practiced_on=datetime.date(2024, 6, 1))

    assert [w.english for w in queries.full_review()] == ["old", "middle", "new"]


def test_full_review_keeps_every_tied_word(store: VocabularyStore, queries: VocabularyQueries) -> None:
    for i in range(10):
        store.insert(f"word {i}", f"zi6 {i}", practiced_on=YESTERDAY)
    store.insert("stale", "gau6", practiced_on=datetime.date(2020, 1, 1))

    words = queries.full_review()
    assert words[0].english == "stale"
    assert sorted(w.english for w in words[1:]) == sorted(f"word {i}" for i in range(10))


def test_due_for_review_excludes_future_dates(store: VocabularyStore, queries: VocabularyQueries) -> None:
    store.insert("yesterday", "kam4 jat6", practiced_on=YESTERDAY)
    store.insert("tomorrow", "ting1 jat6", practiced_on=TOMORROW)

    assert [w.english for w in queries.due_for_review()] == ["yesterday"]
    assert [w.english for w in queries.words_for_practice(SRS_REVIEW)] == ["yesterday"]
    assert len(queries.words_for_practice(GENERAL_REVIEW)) == 2


def test_due_for_review_includes_today(store: VocabularyStore, queries: VocabularyQueries) -> None:
    store.insert("today", "gam1 jat6", practiced_on=TODAY)
    store.insert("last week", "soeng6 go3 lai5 baai3", practiced_on=TODAY - datetime.timedelta(days=7))

    assert [w.english for w in queries.due_for_review()] == ["last week", "today"]
    assert [w.english for w in queries.due_for_review(on=YESTERDAY)] == ["last week"]


def test_random_sample_smaller_store_returns_everything(store: VocabularyStore, queries: VocabularyQueries) -> None:
    for i in range(7):
        store.insert(f"word {i}", f"zi6 {i}")

    sample = queries.random_sample()
    keys = [w.english for w in sample]
    assert len(keys) == 7
    assert len(set(keys)) == 7


def test_random_sample_caps_at_fifty(store: VocabularyStore, queries: VocabularyQueries) -> None:
    for i in range(60):
        store.insert(f"word {i}", f"zi6 {i}")

    keys = [w.english for w in queries.random_sample()]
    assert len(keys) == 50
    assert len(set(keys)) == 50


def test_least_proficient_breaks_ties_by_oldest_date(store: VocabularyStore, queries: VocabularyQueries) -> None:
    store.insert("strong", "keung4", practiced_on=datetime.date(2020, 1, 1), proficiency_level=5)
    store.insert("weak recent", "jeuk6", practiced_on=YESTERDAY, proficiency_level=2)
    store.insert("weak old", "jeuk6 gau6", practiced_on=datetime.date(2023, 1, 1), proficiency_level=2)

    word = queries.least_proficient()
    assert word is not None
    assert word.english == "weak old"


def test_lowest_proficiency_returns_all_ties(store: VocabularyStore, queries: VocabularyQueries) -> None:
    store.insert("a", "aa3", proficiency_level=3)
    store.insert("b", "bi1", proficiency_level=2, practiced_on=YESTERDAY)
    store.insert("c", "si1", proficiency_level=2, practiced_on=datetime.date(2022, 1, 1))
    store.insert("d", "di1", proficiency_level=4)

    words, min_level = queries.lowest_proficiency()
    assert min_level == 2
    assert [w.english for w in words] == ["c", "b"]


def test_null_level_counts_as_one(store: VocabularyStore, queries: VocabularyQueries) -> None:
    store.insert("levelled", "dang2 kap1", proficiency_level=2)
    store.insert("unlevelled", "mou5 dang2 kap1")
    session = store.get_session()
    word = session.get(Word, "unlevelled")
    word.proficiency_level = None
    session.commit()
    session.close()

    assert queries.least_proficient().english == "unlevelled"
    words, min_level = queries.lowest_proficiency()
    assert min_level == 1
    assert [w.to_dict()["proficiency_level"] for w in words] == [1]


def test_export_text_alphabetical(store: VocabularyStore, queries: VocabularyQueries) -> None:
    store.insert("dog", "gau2")
    store.insert("cat", "maau1")
    store.insert("I/my", "ngo5")

    assert queries.export_text() == "I/my, ngo5\ncat, maau1\ndog, gau2"
