from ..llm import LLMClient

MAX_TOKENS = 100

TASK_ACKNOWLEDGMENT = "Processing your request. Please wait a moment."
DANGER_WARNING = "The requested task may be dangerous. Please confirm the command below."

SYSTEM_PROMPT = """
You need to provide a response to the user's input.
If the input is a task, acknowledge the user's request and indicate that you are processing it.
If the input is a question, answer it directly.
---
User Query: {query}
---
Respond in a friendly and concise manner. Always respond in the user's language.
"""


def build_response_prompt(query: str) -> str:
    return SYSTEM_PROMPT.format(query=query)


def generate_response(client: LLMClient, query: str, model: str) -> str:
    """Short friendly reply to `query`: an acknowledgment or a direct answer."""
    messages = [LLMClient.format_system_message(build_response_prompt(query))]
    return client.complete(messages, model=model, max_tokens=MAX_TOKENS)
