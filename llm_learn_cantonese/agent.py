"""OpenAI tool-calling loop and the tutor presets that drive it."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .db import DEBUG_MODE, VocabularyStore
from .tools import execute_tool, openai_tools, result_to_text

DEFAULT_MODEL = "gpt-5.2"
DEFAULT_MAX_STEPS = 30
MAX_COMPLETION_TOKENS = 32768

PERSONA = """You are Lucy (your name is a play on the word for teacher in Cantonese: lou5 si1).
You are a master of Cantonese. You fully understand Cantonese grammar, sentence structure, and vocabulary, and the sentences and conversations you write are natural and fluent."""

SENTENCE_PROMPT = PERSONA + """
Your primary goal is to **drive conversational practice and grammar proficiency** using the user's vocabulary list.

## Sentence Generation Workflow (MANDATORY ORDER)

1. **First:** Call get_least_proficient_word to retrieve the word the user knows least (lowest proficiency, oldest practice date).
2. **Second:** Call get_random_words to retrieve 50 random words from the vocabulary database.
3. **Third:** Write a natural, grammatically correct Cantonese sentence that is not too short or simple.
   - You MUST include the least proficient word from step 1.
   - You may use any of the random words from step 2.
   - If the words are not enough for a natural sentence, call get_random_words again and retry.
4. **After the user's translation attempt:**
   - Tell them whether it was correct, or explain each error.
   - Grade every word individually: only the words the user got wrong are success: false; words used correctly are success: true. Asking for a hint or the answer counts as false.
   - Call update_word_progress with ALL words used in the sentence.
   - If the translation was correct, immediately generate a NEW sentence by repeating steps 1-3.

## Key Rules
- All sentences must be grammatically correct.
- All Cantonese must be written in Jyutping (no Chinese characters).
"""

CONVERSATION_PROMPT = PERSONA + """
Your primary goal is to **practice conversation** with the user using only the words they know.

1. **First:** Call get_words_for_practice with mode "general_review" to retrieve every word the user knows.
2. Use ONLY words from that list. If you need a word that is not in the list, work around it.
3. Keep the conversation natural, engaging and appropriate for language practice.
4. All Cantonese must be written in Jyutping (no Chinese characters).
"""

TUTOR_PROMPT = PERSONA + """
You are the user's only interface to their vocabulary database. Use the tools as soon as the user's intent is clear.

- **add_new_word**: whenever you teach a new word or the user asks to track a word pair. Afterwards tell the user it is now tracked.
- **update_word_progress**: after every practice attempt, for all words used; success is false for mistakes or when the user asked for a hint.
- **get_words_for_practice**: mode "srs_review" for a daily/due review, mode "general_review" to generate sentences or conversations with anything the user knows.
- **get_words_with_lowest_proficiency**: when the user asks which words they struggle with most.
- **remove_word**: only when the user explicitly asks to delete or forget a word.
- **get_all_words_csv**: only when the user asks to see or export their whole word list; copy the returned text into your reply.

Rules:
- Sentences must be full, complete and grammatically correct. Only introduce a new word when necessary, say so explicitly, and call add_new_word.
- All Cantonese must be written in Jyutping (no Chinese characters).
- Do not reveal the answer until the user has tried or asks for a hint.
- If a tool returns an error, tell the user and show it in a code block. If a tool returns no words, suggest learning a new word.
- After each answer, ask whether the user wants another sentence or to continue the conversation.
"""


@dataclass
class AgentPreset:
    name: str
    system_prompt: str
    tool_names: List[str]


PRESETS: Dict[str, AgentPreset] = {
    "sentence": AgentPreset(
        "sentence", SENTENCE_PROMPT,
        ["get_least_proficient_word", "get_random_words", "update_word_progress"],
    ),
    "conversation": AgentPreset(
        "conversation", CONVERSATION_PROMPT,
        ["get_words_for_practice"],
    ),
    "tutor": AgentPreset(
        "tutor", TUTOR_PROMPT,
        ["get_words_for_practice", "get_random_words", "get_least_proficient_word",
         "get_words_with_lowest_proficiency", "add_new_word", "remove_word",
         "update_word_progress", "get_all_words_csv"],
    ),
}
DEFAULT_PRESET = "sentence"

STEP_LIMIT_MESSAGE = "I had to stop after too many tool calls. Please try again."


@dataclass
class ToolInvocation:
    name: str
    arguments: Union[str, Dict[str, Any], None]
    result: Any

    def to_dict(self) -> Dict[str, Any]:
        arguments = self.arguments
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments or "{}")
            except json.JSONDecodeError:
                pass
        return {"name": self.name, "arguments": arguments, "result": self.result}


@dataclass
class AgentReply:
    text: str
    tool_calls: List[ToolInvocation] = field(default_factory=list)
    steps: int = 0
    stopped_early: bool = False


class CantoneseAgent:
    """Runs one chat turn: model call, tool execution, repeat until plain text.

    ``client`` is an ``openai.OpenAI`` instance (or anything exposing
    ``chat.completions.create``). At most ``max_steps`` model calls are made
    per turn.
    """

    def __init__(self, client: Any, store: VocabularyStore, preset: str = DEFAULT_PRESET,
                 model_name: str = DEFAULT_MODEL, max_steps: int = DEFAULT_MAX_STEPS) -> None:
        if preset not in PRESETS:
            raise ValueError(f"Unknown agent preset {preset!r}; choose from {', '.join(PRESETS)}")
        self.client = client
        self.store = store
        self.preset = PRESETS[preset]
        self.model_name = model_name
        self.max_steps = max_steps

    def _call_tool(self, name: str, arguments: Optional[str]) -> Any:
        if name not in self.preset.tool_names:
            return {"success": False, "error": "UnknownTool",
                    "message": f"Tool {name!r} is not available to the {self.preset.name} agent."}
        return execute_tool(self.store, name, arguments)

    def run(self, messages: List[Dict[str, str]]) -> AgentReply:
        conversation: List[Dict[str, Any]] = [{"role": "system", "content": self.preset.system_prompt}]
        for message in messages:
            conversation.append({"role": message["role"], "content": message["content"]})
        tools = openai_tools(self.preset.tool_names)
        invocations: List[ToolInvocation] = []

        for step in range(1, self.max_steps + 1):
            if DEBUG_MODE:
                print(f"🤖 {self.preset.name} agent step {step}: {len(conversation)} messages, model {self.model_name}")

            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=conversation,  # type: ignore
                tools=tools,  # type: ignore
                tool_choice="auto",
                max_completion_tokens=MAX_COMPLETION_TOKENS,
            )
            message = response.choices[0].message
            tool_calls = getattr(message, "tool_calls", None) or []
            if not tool_calls:
                return AgentReply(text=message.content or "", tool_calls=invocations, steps=step)

            conversation.append({
                "role": "assistant",
                "content": message.content or "",
                "tool_calls": [{
                    "id": tc.id,
                    "type": "function",
                    "function": {"name": tc.function.name, "arguments": tc.function.arguments},
                } for tc in tool_calls],
            })
            for tc in tool_calls:
                result = self._call_tool(tc.function.name, tc.function.arguments)
                invocations.append(ToolInvocation(tc.function.name, tc.function.arguments, result))
                conversation.append({
                    "role": "tool",
                    "tool_call_id": tc.id,
                    "content": result_to_text(result),
                })

        if DEBUG_MODE:
            print(f"⚠️ {self.preset.name} agent stopped after {self.max_steps} steps")
        return AgentReply(text=STEP_LIMIT_MESSAGE, tool_calls=invocations,
                          steps=self.max_steps, stopped_early=True)
