"""
Tests for the tool registry the tutor model calls.
"""

import datetime
import json
from typing import Generator

import pytest

from llm_learn_cantonese.db import VocabularyStore
from llm_learn_cantonese.errors import StoreUnavailable
from llm_learn_cantonese.tools import TOOLS, execute_tool, openai_tools, result_to_text

ALL_TOOLS = {
    "get_words_for_practice",
    "get_random_words",
    "get_least_proficient_word",
    "get_words_with_lowest_proficiency",
    "get_all_words_csv",
    "add_new_word",
    "remove_word",
    "update_word_progress",
}


@pytest.fixture
def store(tmp_path) -> Generator[VocabularyStore, None, None]:
    s = VocabularyStore(str(tmp_path / "test_tools.db")).init()
    yield s
    s.close()


def test_every_tool_registered() -> None:
    assert set(TOOLS) == ALL_TOOLS


def test_openai_schemas() -> None:
    schemas = {s["function"]["name"]: s for s in openai_tools()}
    assert set(schemas) == ALL_TOOLS
    for schema in schemas.values():
        assert schema["type"] == "function"
        assert schema["function"]["description"]
        assert schema["function"]["parameters"]["type"] == "object"

    add_params = schemas["add_new_word"]["function"]["parameters"]
    assert set(add_params["required"]) == {"english", "cantonese_jyutping"}
    mode = schemas["get_words_for_practice"]["function"]["parameters"]["properties"]["mode"]
    assert mode["enum"] == ["srs_review", "general_review"]


def test_openai_tools_subset_keeps_order() -> None:
    names = ["update_word_progress", "get_random_words"]
    assert [s["function"]["name"] for s in openai_tools(names)] == names


def test_add_new_word(store: VocabularyStore) -> None:
    result = execute_tool(store, "add_new_word", {"english": "cat", "cantonese_jyutping": "maau1"})
    assert result["success"] is True
    assert result["word"] == {
        "english": "cat",
        "cantonese_jyutping": "maau1",
        "last_practiced_date": datetime.date.today().isoformat(),
        "proficiency_level": 1,
    }
    assert store.count() == 1


def test_add_new_word_trims_fields(store: VocabularyStore) -> None:
    result = execute_tool(store, "add_new_word", {"english": " cat ", "cantonese_jyutping": "  maau1 "})
    assert result["success"] is True
    assert store.get_by_key("cat").cantonese_jyutping == "maau1"

    again = execute_tool(store, "add_new_word", {"english": "cat", "cantonese_jyutping": "maau1"})
    assert again["error"] == "DuplicateKey"
    assert store.count() == 1


def test_add_duplicate_word_keeps_original(store: VocabularyStore) -> None:
    store.insert("cat", "maau1")
    result = execute_tool(store, "add_new_word", {"english": "cat", "cantonese_jyutping": "maau1 maau1"})
    assert result["success"] is False
    assert result["error"] == "DuplicateKey"
    assert store.get_by_key("cat").cantonese_jyutping == "maau1"


@pytest.mark.parametrize("arguments", [
    {"english": "", "cantonese_jyutping": "maau1"},
    {"english": "cat", "cantonese_jyutping": "   "},
    {"english": "cat"},
    {},
])
def test_add_new_word_rejects_missing_fields(store: VocabularyStore, arguments) -> None:
    result = execute_tool(store, "add_new_word", arguments)
    assert result["success"] is False
    assert result["error"] == "InvalidInput"
    assert store.count() == 0


def test_arguments_as_json_string(store: VocabularyStore) -> None:
    result = execute_tool(store, "add_new_word", json.dumps({"english": "dog", "cantonese_jyutping": "gau2"}))
    assert result["success"] is True
    assert store.get_by_key("dog") is not None


def test_malformed_json_arguments(store: VocabularyStore) -> None:
    result = execute_tool(store, "add_new_word", '{"english": "dog", ')
    assert result["success"] is False
    assert result["error"] == "InvalidInput"


def test_unknown_tool(store: VocabularyStore) -> None:
    result = execute_tool(store, "drop_database", {})
    assert result == {"success": False, "error": "UnknownTool", "message": "No tool named 'drop_database'."}


def test_words_for_practice_modes(store: VocabularyStore) -> None:
    store.insert("yesterday", "kam4 jat6", practiced_on=datetime.date.today() - datetime.timedelta(days=1))
    store.insert("tomorrow", "ting1 jat6", practiced_on=datetime.date.today() + datetime.timedelta(days=1))

    srs = execute_tool(store, "get_words_for_practice", {"mode": "srs_review"})
    assert srs["mode"] == "srs_review"
    assert srs["count"] == 1
    assert srs["words"][0]["english"] == "yesterday"

    general = execute_tool(store, "get_words_for_practice", None)
    assert general["mode"] == "general_review"
    assert [w["english"] for w in general["words"]] == ["yesterday", "tomorrow"]

    bad = execute_tool(store, "get_words_for_practice", {"mode": "cram"})
    assert bad["error"] == "InvalidInput"


def test_empty_store_reads(store: VocabularyStore) -> None:
    assert execute_tool(store, "get_random_words")["count"] == 0
    assert execute_tool(store, "get_least_proficient_word") == {"word": None, "message": "No words found in database."}
    lowest = execute_tool(store, "get_words_with_lowest_proficiency")
    assert lowest == {"words": [], "count": 0, "min_proficiency_level": None}
    assert execute_tool(store, "get_all_words_csv") == ""


def test_least_proficient_and_lowest(store: VocabularyStore) -> None:
    store.insert("easy", "jung4 ji6", proficiency_level=4)
    store.insert("hard", "naan4", proficiency_level=2, practiced_on=datetime.date(2024, 1, 1))
    store.insert("harder", "hou2 naan4", proficiency_level=2, practiced_on=datetime.date(2023, 1, 1))

    assert execute_tool(store, "get_least_proficient_word")["word"]["english"] == "harder"
    lowest = execute_tool(store, "get_words_with_lowest_proficiency")
    assert lowest["min_proficiency_level"] == 2
    assert [w["english"] for w in lowest["words"]] == ["harder", "hard"]


def test_get_all_words_csv(store: VocabularyStore) -> None:
    store.insert("dog", "gau2")
    store.insert("cat", "maau1")
    text = execute_tool(store, "get_all_words_csv")
    assert text == "cat, maau1\ndog, gau2"
    assert result_to_text(text) == text


def test_remove_word_by_jyutping(store: VocabularyStore) -> None:
    store.insert("I / my", "ngo5")
    result = execute_tool(store, "remove_word", {"english": "NGO5"})
    assert result["success"] is True
    assert result["removed_word"] == {"english": "I / my", "cantonese_jyutping": "ngo5"}
    assert store.count() == 0


def test_remove_missing_word(store: VocabularyStore) -> None:
    store.insert("cat", "maau1")
    result = execute_tool(store, "remove_word", {"english": "unicorn"})
    assert result["success"] is False
    assert result["error"] == "WordNotFound"
    assert store.count() == 1


def test_update_word_progress(store: VocabularyStore) -> None:
    store.insert("cat", "maau1", proficiency_level=3, practiced_on=datetime.date(2024, 1, 1))
    store.insert("dog", "gau2", proficiency_level=1)

    result = execute_tool(store, "update_word_progress", {"words": [
        {"cantonese_jyutping": "maau1", "success": True},
        {"english": "dog", "success": False},
        {"english": "unicorn", "success": True},
    ]})

    assert result["success"] is True
    assert result["succeeded_count"] == 2
    assert result["failed_count"] == 1
    assert result["failed_words"][0]["english"] == "unicorn"
    assert result["failed_words"][0]["error"] == "WordNotFound"
    assert {w["english"]: w["proficiency_level"] for w in result["updated_words"]} == {"cat": 4, "dog": 1}
    assert store.get_by_key("cat").last_practiced_date == datetime.date.today()
    json.loads(result_to_text(result))


def test_update_word_progress_entry_without_text_fails_alone(store: VocabularyStore) -> None:
    store.insert("cat", "maau1", proficiency_level=3)
    result = execute_tool(store, "update_word_progress", {"words": [
        {"english": "cat", "success": True},
        {"english": "", "success": False},
        {"success": False},
    ]})
    assert result["success"] is True
    assert result["succeeded_count"] == 1
    assert result["failed_count"] == 2
    assert [f["error"] for f in result["failed_words"]] == ["InvalidInput", "InvalidInput"]
    assert store.get_by_key("cat").proficiency_level == 4


def test_update_word_progress_rejects_empty_batch(store: VocabularyStore) -> None:
    result = execute_tool(store, "update_word_progress", {"words": []})
    assert result["error"] == "InvalidInput"


def test_closed_store_propagates(store: VocabularyStore) -> None:
    store.close()
    with pytest.raises(StoreUnavailable):
        execute_tool(store, "get_random_words")
