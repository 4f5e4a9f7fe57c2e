import logging

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import aisuite
import openai
from aisuite.provider import LLMError

from ..errors import (
    CompletionError,
    EmptyResponseError,
    SerializationError,
    TransportError,
)

logger = logging.getLogger(__name__)

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unsupported message role '{self.role}'.")

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class CompletionRequest:
    """A single chat completion call. Built fresh for every request."""

    model: str
    messages: Tuple[ChatMessage, ...]
    max_tokens: int
    temperature: float = 1.0
    top_p: float = 1.0

    def to_kwargs(self) -> Dict:
        return {
            "model": self.model,
            "messages": [m.as_dict() for m in self.messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
        }


def _translate_error(error: Exception) -> CompletionError:
    # aisuite wraps provider exceptions in LLMError; the original one is kept
    # as the implicit context.
    cause = error
    if isinstance(error, LLMError) and error.__context__ is not None:
        cause = error.__context__

    if isinstance(cause, openai.APIConnectionError):
        return TransportError(f"Could not reach the completion service: {cause}")
    if isinstance(cause, openai.APIResponseValidationError):
        return SerializationError(f"Malformed response from the completion service: {cause}")
    if isinstance(cause, openai.APIStatusError):
        return TransportError(
            f"The completion service answered with status {cause.status_code}: {cause.message}"
        )
    if isinstance(cause, (ValueError, TypeError)):
        return SerializationError(f"Could not encode or decode the completion: {cause}")
    return TransportError(str(cause))


class LLMClient:
    """
    A wrapper for the LLM client to abstract away the specific provider library.

    The credential is handed in explicitly and kept for the lifetime of the
    client; nothing is read from or written to the environment.
    """

    def __init__(
        self,
        api_key: str,
        provider: str = "openai",
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initializes the LLM client.

        Args:
            api_key: Bearer token sent with every request.
            provider: aisuite provider key, used as the model prefix.
            base_url: Optional override of the service endpoint.
            timeout: Seconds to wait for a response. None waits forever.
        """
        provider_config = {"api_key": api_key, "max_retries": 0}
        if base_url:
            provider_config["base_url"] = base_url
        if timeout is not None:
            provider_config["timeout"] = timeout

        self.provider = provider
        self.client = aisuite.Client({provider: provider_config})

    @staticmethod
    def format_system_message(content: str) -> ChatMessage:
        return ChatMessage("system", content)

    @staticmethod
    def format_user_message(content: str) -> ChatMessage:
        return ChatMessage("user", content)

    def complete(self, messages: List[ChatMessage], model: str, max_tokens: int) -> str:
        """
        Sends one chat completion request and returns the first choice's text.

        Raises:
            TransportError: The service could not be reached or rejected the call.
            SerializationError: The request or response body was malformed.
            EmptyResponseError: The response contained no choices.
        """
        request = CompletionRequest(
            model=f"{self.provider}:{model}",
            messages=tuple(messages),
            max_tokens=max_tokens,
        )
        logger.debug(
            "Requesting completion from %s (%d messages, max_tokens=%d)",
            request.model,
            len(request.messages),
            request.max_tokens,
        )

        try:
            response = self.client.chat.completions.create(**request.to_kwargs())
        except (LLMError, openai.OpenAIError, ValueError, TypeError) as e:
            raise _translate_error(e) from e

        choices = getattr(response, "choices", None)
        if choices is None:
            raise SerializationError("The completion response has no 'choices' field.")
        if len(choices) == 0:
            raise EmptyResponseError("No response from the completion service.")

        try:
            content = choices[0].message.content
        except (AttributeError, TypeError) as e:
            raise SerializationError(f"Unexpected completion response shape: {e}") from e

        return (content or "").strip()
