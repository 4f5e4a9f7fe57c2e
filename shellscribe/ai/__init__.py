"""
The `ai` package holds the completion client and the single-shot assistants
the prompt loop chains together.
"""

from .llm import ChatMessage, CompletionRequest, LLMClient
from .assistants.classify import QueryKind, classify
from .assistants.generate import extract_script, generate_command
from .assistants.interpret import interpret
from .assistants.respond import generate_response


__all__ = [
    "ChatMessage",
    "CompletionRequest",
    "LLMClient",
    "QueryKind",
    "classify",
    "extract_script",
    "generate_command",
    "generate_response",
    "interpret",
]
