from enum import Enum

from ..llm import LLMClient

MAX_TOKENS = 50

SYSTEM_PROMPT = """
You need to determine if the user's query requires executing a script, is a simple question, or is potentially dangerous.
Respond with "y" if it requires executing a script, "n" if it is a simple question, and "w" if it is a potentially dangerous task.
Respond with that single letter only.
---
User Query: {query}
"""


class QueryKind(Enum):
    """What the model decided a query is."""

    TASK = "y"
    QUERY = "n"
    DANGEROUS = "w"
    UNKNOWN = "?"

    @classmethod
    def parse(cls, label: str) -> "QueryKind":
        """Maps a raw classifier answer to a kind, falling back to UNKNOWN."""
        label = label.strip().lower()
        for kind in (cls.TASK, cls.QUERY, cls.DANGEROUS):
            if label == kind.value:
                return kind
        return cls.UNKNOWN


def build_classification_prompt(query: str) -> str:
    return SYSTEM_PROMPT.format(query=query)


def classify(client: LLMClient, query: str, model: str) -> str:
    """Returns the trimmed raw label; callers parse it with `QueryKind.parse`."""
    messages = [LLMClient.format_system_message(build_classification_prompt(query))]
    return client.complete(messages, model=model, max_tokens=MAX_TOKENS).strip()
