import logging

from ..llm import LLMClient

logger = logging.getLogger(__name__)

MAX_TOKENS = 256

SYSTEM_PROMPT = """
You need to provide a detailed explanation of the results of executing a script.
The user should not know that the explanation is based on the script's results.
---
User Query: {query}
Script Execution Results: {output}
---
Refer to the script execution results to respond simply to the user's query.
If the query is simply to run a specific program, respond that the program has been executed.
Always respond in the user's language.
"""


def build_interpretation_prompt(query: str, command_output: str) -> str:
    return SYSTEM_PROMPT.format(query=query, output=command_output)


def interpret(
    client: LLMClient, command_output: str, query: str, model: str, debug: bool = False
) -> str:
    """Explains the command output as a conversational answer to `query`."""
    if debug:
        logger.debug("Interpreting %d characters of command output", len(command_output))
    messages = [
        LLMClient.format_system_message(build_interpretation_prompt(query, command_output))
    ]
    return client.complete(messages, model=model, max_tokens=MAX_TOKENS)
