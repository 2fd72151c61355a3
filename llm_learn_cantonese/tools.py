"""Tool registry exposed to the hosted model.

Each tool is registered with ``@tool(name, description, ArgsModel)`` and
receives the store plus a validated pydantic argument object. Arguments are
validated before any store access; a bad payload becomes an ``InvalidInput``
result instead of an exception, so the model can see what went wrong and
try again. Only ``StoreUnavailable`` (and unexpected database errors)
propagate to the caller.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .db import DEBUG_MODE, VocabularyStore
from .errors import DuplicateKey, InvalidInput, VocabularyError, WordNotFound
from .matcher import find_word
from .progress import ProgressUpdater
from .queries import GENERAL_REVIEW, VocabularyQueries

ToolResult = Union[Dict[str, Any], str]


# ---------------------------------------------------------------------------
# Argument models
# ---------------------------------------------------------------------------

class NoArguments(BaseModel):
    model_config = ConfigDict(extra="ignore")


class WordsForPracticeArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mode: Literal["srs_review", "general_review"] = Field(
        default=GENERAL_REVIEW,
        description="general_review (default): every word, least recently practiced first. "
                    "srs_review: only words due for review (last practiced today or earlier).",
    )


def _non_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class AddNewWordArgs(BaseModel):
    english: str = Field(description="The English translation of the word")
    cantonese_jyutping: str = Field(description="The Cantonese romanization (e.g., ping4 gwo2)")

    @field_validator("english", "cantonese_jyutping")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        return _non_blank(value)


class RemoveWordArgs(BaseModel):
    english: str = Field(
        description="The English word or Cantonese (jyutping) to remove. Either form is accepted."
    )

    @field_validator("english")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        return _non_blank(value)


class ProgressEntry(BaseModel):
    english: Optional[str] = Field(
        default=None, description="The English word to update. Either english or cantonese_jyutping must be provided."
    )
    cantonese_jyutping: Optional[str] = Field(
        default=None, description="The Cantonese (jyutping) to update. Either english or cantonese_jyutping must be provided."
    )
    success: bool = Field(description="True if the user remembered the word, False if they struggled")

    @property
    def query(self) -> str:
        if self.english and self.english.strip():
            return self.english
        return self.cantonese_jyutping or ""


class UpdateWordProgressArgs(BaseModel):
    words: List[ProgressEntry] = Field(
        min_length=1, description="Array of words to update with their success status"
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass
class Tool:
    name: str
    description: str
    args_model: Type[BaseModel]
    fn: Callable[[VocabularyStore, Any], ToolResult]

    def schema(self) -> Dict[str, Any]:
        """OpenAI function-calling definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.args_model.model_json_schema(),
            },
        }


TOOLS: Dict[str, Tool] = {}


def tool(name: str, description: str, args_model: Type[BaseModel] = NoArguments):
    """Decorator to register a tool handler."""
    def decorator(fn: Callable) -> Callable:
        TOOLS[name] = Tool(name=name, description=description, args_model=args_model, fn=fn)
        return fn
    return decorator


def openai_tools(names: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    selected = names if names is not None else list(TOOLS)
    return [TOOLS[name].schema() for name in selected]


def _failure(error: VocabularyError) -> Dict[str, Any]:
    return {"success": False, "error": error.code, "message": error.message}


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "arguments"
        parts.append(f"{location}: {err['msg']}")
    return "Invalid arguments - " + "; ".join(parts)


def parse_arguments(args_model: Type[BaseModel], arguments: Union[str, Dict[str, Any], None]) -> BaseModel:
    if isinstance(arguments, str):
        return args_model.model_validate_json(arguments or "{}")
    return args_model.model_validate(arguments or {})


def execute_tool(store: VocabularyStore, name: str,
                 arguments: Union[str, Dict[str, Any], None] = None) -> ToolResult:
    """Validate ``arguments`` and run the named tool against ``store``."""
    registered = TOOLS.get(name)
    if registered is None:
        return {"success": False, "error": "UnknownTool", "message": f"No tool named {name!r}."}

    try:
        args = parse_arguments(registered.args_model, arguments)
    except ValidationError as e:
        failure = InvalidInput(_describe_validation_error(e))
        if DEBUG_MODE:
            print(f"❌ {name}: {failure.message}")
        return _failure(failure)

    if DEBUG_MODE:
        print(f"🔧 {name} params: {args.model_dump()}")

    try:
        return registered.fn(store, args)
    except (DuplicateKey, WordNotFound, InvalidInput) as e:
        if DEBUG_MODE:
            print(f"❌ {name}: {e.message}")
        return _failure(e)


def result_to_text(result: ToolResult) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Read tools
# ---------------------------------------------------------------------------

@tool(
    "get_words_for_practice",
    "Retrieve words for practice. Use general_review mode (default) for any words ordered by least "
    "recently practiced, or srs_review mode for words due for review. When the user asks for an "
    "\"SRS review\" or \"due words\", use srs_review mode. Returns all matching words without a limit.",
    WordsForPracticeArgs,
)
def handle_get_words_for_practice(store: VocabularyStore, args: WordsForPracticeArgs) -> ToolResult:
    words = VocabularyQueries(store).words_for_practice(args.mode)
    return {
        "words": [w.to_dict() for w in words],
        "count": len(words),
        "mode": args.mode,
    }


@tool(
    "get_random_words",
    "Retrieve 50 random words from the vocabulary database. Useful for generating sentences with a "
    "diverse set of vocabulary words.",
)
def handle_get_random_words(store: VocabularyStore, args: NoArguments) -> ToolResult:
    words = VocabularyQueries(store).random_sample()
    return {
        "words": [w.to_dict() for w in words],
        "count": len(words),
        "message": f"Retrieved {len(words)} random words from the database.",
    }


@tool(
    "get_least_proficient_word",
    "Retrieve the word with the lowest proficiency level. If several words share the lowest level, "
    "returns the one practiced least recently.",
)
def handle_get_least_proficient_word(store: VocabularyStore, args: NoArguments) -> ToolResult:
    word = VocabularyQueries(store).least_proficient()
    if word is None:
        return {"word": None, "message": "No words found in database."}
    return {"word": word.to_dict()}


@tool(
    "get_words_with_lowest_proficiency",
    "Retrieve every word sharing the lowest proficiency_level, least recently practiced first. "
    "Useful for finding the words that need the most practice.",
)
def handle_get_words_with_lowest_proficiency(store: VocabularyStore, args: NoArguments) -> ToolResult:
    words, min_level = VocabularyQueries(store).lowest_proficiency()
    return {
        "words": [w.to_dict() for w in words],
        "count": len(words),
        "min_proficiency_level": min_level,
    }


@tool(
    "get_all_words_csv",
    "Retrieve all words as plain text, one per line in the format \"english, jyutping\". "
    "IMPORTANT: copy the returned text into your reply so the user can see their word list.",
)
def handle_get_all_words_csv(store: VocabularyStore, args: NoArguments) -> ToolResult:
    return VocabularyQueries(store).export_text()


# ---------------------------------------------------------------------------
# Write tools
# ---------------------------------------------------------------------------

@tool(
    "add_new_word",
    "Add a newly learned word to the vocabulary database. Starts with last_practiced_date = today "
    "and proficiency_level = 1.",
    AddNewWordArgs,
)
def handle_add_new_word(store: VocabularyStore, args: AddNewWordArgs) -> ToolResult:
    word = store.insert(args.english, args.cantonese_jyutping)
    return {
        "success": True,
        "message": f'Word "{word.english}" ({word.cantonese_jyutping}) has been added to the vocabulary database.',
        "word": word.to_dict(),
    }


@tool(
    "remove_word",
    "Remove a word from the vocabulary database. Use only when the user explicitly asks to delete, "
    "remove or forget a word. Accepts the English word or its jyutping and tolerates format "
    "variations such as \"I / my\" for \"I/my\".",
    RemoveWordArgs,
)
def handle_remove_word(store: VocabularyStore, args: RemoveWordArgs) -> ToolResult:
    english = find_word(store, args.english)
    removed = store.delete(english) if english is not None else None
    if removed is None:
        raise WordNotFound(
            f'Word "{args.english}" not found in the database (searched as both English and Cantonese).',
            word=args.english,
        )
    if DEBUG_MODE:
        print(f"✅ Removed word \"{removed.english}\"")
    return {
        "success": True,
        "message": f'Word "{removed.english}" ({removed.cantonese_jyutping}) has been removed from your vocabulary database.',
        "removed_word": {"english": removed.english, "cantonese_jyutping": removed.cantonese_jyutping},
    }


@tool(
    "update_word_progress",
    "Update proficiency after practicing one or more words. For each entry give english OR "
    "cantonese_jyutping plus success. success=true raises proficiency_level by 1, success=false lowers "
    "it by 1 (minimum 1). last_practiced_date is always set to today. Format variations are matched "
    "automatically.",
    UpdateWordProgressArgs,
)
def handle_update_word_progress(store: VocabularyStore, args: UpdateWordProgressArgs) -> ToolResult:
    result = ProgressUpdater(store).apply((entry.query, entry.success) for entry in args.words)
    return {
        "success": result.success,
        "message": result.message,
        "updated_words": [w.to_dict() for w in result.updated],
        "failed_words": [f.to_dict() for f in result.failed],
        "succeeded_count": result.succeeded_count,
        "failed_count": result.failed_count,
    }
