import logging

from typing import Callable, Optional

from rich.console import Console
from rich.prompt import Confirm
from rich.text import Text

from .ai.assistants.classify import QueryKind, classify
from .ai.assistants.generate import generate_command
from .ai.assistants.interpret import interpret
from .ai.assistants.respond import DANGER_WARNING, TASK_ACKNOWLEDGMENT, generate_response
from .ai.llm import LLMClient
from .config import AppConfig, SessionContext
from .errors import ClassificationError, ConfirmationDeclined, ShellScribeError
from .shell import run_command

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit")


class _StageFailed(Exception):
    """One step of a turn failed; the rest of the turn is skipped."""

    def __init__(self, action: str, error: ShellScribeError):
        super().__init__(f"Failed to {action}: {error}")
        self.action = action
        self.error = error


class ShellSession:
    """
    The interactive prompt loop.

    Each line the user enters is classified and then answered, executed, or
    executed after confirmation. A failing turn prints a diagnostic and the
    loop carries on with a fresh prompt; only exit/quit, end of input or an
    interrupt end the session.
    """

    def __init__(
        self,
        context: SessionContext,
        config: AppConfig,
        client: LLMClient,
        debug: bool = False,
        console: Optional[Console] = None,
        read_input: Optional[Callable[[], str]] = None,
        confirm: Optional[Callable[[], bool]] = None,
    ):
        self.context = context
        self.config = config
        self.client = client
        self.debug = debug
        self.console = console or Console()
        self._read_input = read_input or self._prompt_user
        self._confirm = confirm or self._confirm_execution

    @property
    def prompt_label(self) -> Text:
        return Text.assemble(("ShellScribeAI", "yellow"), " ", (str(self.context.os_kind), "green"), " $ ")

    def _prompt_user(self) -> str:
        return self.console.input(self.prompt_label)

    def _confirm_execution(self) -> bool:
        return Confirm.ask("Do you want to execute this command?", console=self.console)

    def _print(self, message: str, style: str):
        # Text keeps rich from interpreting [brackets] in model replies as markup.
        self.console.print(Text(message, style=style))

    def run(self):
        self._print(
            f"OS: {self.context.os_kind}\nShell Version: {self.context.shell_version}", "cyan"
        )
        while True:
            try:
                query = self._read_input()
            except (KeyboardInterrupt, EOFError):
                self._say_goodbye()
                return

            if not self.handle(query):
                return

    def _say_goodbye(self):
        self._print("Exiting the program. Goodbye!", "blue")

    def handle(self, query: str) -> bool:
        """Runs one turn. Returns False when the session should end."""
        query = query.strip()
        if query.lower() in EXIT_COMMANDS:
            self._say_goodbye()
            return False
        if not query:
            return True

        try:
            self._dispatch(query)
        except ConfirmationDeclined as e:
            self._print(str(e), "yellow")
        except _StageFailed as e:
            logger.debug("Turn aborted while trying to %s", e.action, exc_info=e.error)
            self._print(str(e), "red")
        except ClassificationError as e:
            self._print(str(e), "red")
        return True

    def _stage(self, action: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ShellScribeError as e:
            raise _StageFailed(action, e) from e

    def _dispatch(self, query: str):
        label = self._stage("determine the nature of the query", classify, self.client, query, self.config.model)
        kind = QueryKind.parse(label)
        logger.debug("Query classified as %s (%r)", kind.name, label)

        if kind == QueryKind.QUERY:
            self._answer(query)
        elif kind == QueryKind.TASK:
            self._run_task(query)
        elif kind == QueryKind.DANGEROUS:
            self._run_dangerous_task(query)
        else:
            raise ClassificationError(label)

    def _respond(self, text: str) -> str:
        return self._stage("generate response", generate_response, self.client, text, self.config.model)

    def _generate(self, query: str) -> str:
        return self._stage(
            "generate command",
            generate_command,
            self.client,
            self.context.os_kind,
            self.context.shell_version,
            query,
            self.config.model,
            debug=self.debug,
            console=self.console,
        )

    def _answer(self, query: str):
        self._print(self._respond(query), "green")

    def _run_task(self, query: str):
        self._print(self._respond(TASK_ACKNOWLEDGMENT), "green")
        command = self._generate(query)
        self._execute_and_interpret(query, command)

    def _run_dangerous_task(self, query: str):
        self._print(self._respond(DANGER_WARNING), "red")
        command = self._generate(query)
        self._print(f"Generated Command: {command}", "yellow")

        try:
            confirmed = self._confirm()
        except (KeyboardInterrupt, EOFError):
            confirmed = False
        if not confirmed:
            raise ConfirmationDeclined()

        self._execute_and_interpret(query, command)

    def _execute_and_interpret(self, query: str, command: str):
        result = run_command(
            self.context.os_kind,
            command,
            debug=self.debug,
            timeout=self.config.command_timeout,
            console=self.console,
        )
        if result.error is not None:
            raise _StageFailed("execute command", result.error)

        interpretation = self._stage(
            "interpret command output",
            interpret,
            self.client,
            result.output,
            query,
            self.config.model,
            debug=self.debug,
        )
        self._print(interpretation, "green")
