from typing import Optional

from rich.console import Console
from rich.text import Text

from ...shell import OSKind
from ..llm import LLMClient

MAX_TOKENS = 256
FENCE = "```"

SYSTEM_PROMPT = """
# Instruction
 - You are an assistant for a {os_kind} operating system with the following details:
 - You must only provide the Script, without any additional explanation or text like description.
 - Your responses should be informative, visually appealing, logical and actionable.
 - Your responses should be very simple and complete.

# Script Creation Rules
 - OS Information: {os_kind}
 - Shell Version: {shell_version}
 - Based on the user's input, generate a script to accomplish the task.
 - To distinguish between each server, print the hostnames on environment variables.
"""


def build_command_prompt(os_kind: OSKind, shell_version: str) -> str:
    return SYSTEM_PROMPT.format(os_kind=os_kind, shell_version=shell_version)


def extract_script(response: str) -> str:
    """
    Drops the fence delimiter lines from a model reply.

    Only lines whose stripped text starts with ``` are removed. Any prose the
    model wrote around the fences is kept as-is.
    """
    lines = response.split("\n")
    return "\n".join(line for line in lines if not line.strip().startswith(FENCE))


def generate_command(
    client: LLMClient,
    os_kind: OSKind,
    shell_version: str,
    query: str,
    model: str,
    debug: bool = False,
    console: Optional[Console] = None,
) -> str:
    messages = [
        LLMClient.format_system_message(build_command_prompt(os_kind, shell_version)),
        LLMClient.format_user_message(query),
    ]
    response = client.complete(messages, model=model, max_tokens=MAX_TOKENS)
    command = extract_script(response)

    if debug:
        console = console or Console()
        console.print(Text(f"Generated Command: {command}", style="yellow"))

    return command
