#!/usr/bin/env python3

import argparse
import argcomplete
import sys

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import List, Optional

from rich.console import Console

from .ai.llm import LLMClient
from .config import SessionContext, load_config, resolve_api_key
from .errors import ConfigError, CredentialError
from .log import setup_logging
from .session import ShellSession
from .shell import detect_os_kind, detect_shell_version


class Argument(ABC):
    def __init__(self, help: str, kwargs: Optional[dict] = None):
        self.help = help
        self.kwargs = kwargs if kwargs is not None else {}

    @abstractmethod
    def add_to_parser(self, parser: argparse.ArgumentParser):
        pass


class OptionalArg(Argument):
    def __init__(
        self,
        short_option: str,
        long_option: str,
        help: str,
        kwargs: Optional[dict] = None,
    ):
        super().__init__(help=help, kwargs=kwargs)
        self.short_option = short_option
        self.long_option = long_option

    def add_to_parser(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            self.short_option, self.long_option, help=self.help, **self.kwargs
        )


_arguments: List[Argument] = [
    OptionalArg(
        short_option="-d",
        long_option="--debug",
        help="Echo generated commands, executed commands and their raw output.",
        kwargs={"action": "store_true"},
    ),
    OptionalArg(
        short_option="-c",
        long_option="--config",
        help="Path to a JSON configuration file. Defaults to ~/.shellscribe/config.json.",
        kwargs={"metavar": "PATH"},
    ),
    OptionalArg(
        short_option="-m",
        long_option="--model",
        help="Model to use instead of the configured one.",
    ),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Describe what you want in plain language and let the AI run it in your shell."
    )
    for arg in _arguments:
        arg.add_to_parser(parser)
    return parser


def run_cli(argv: Optional[List[str]] = None):
    """
    Parses command-line arguments, resolves the session and starts the prompt loop.

    Args:
        argv: A list of strings representing the command-line arguments.
              If None, `sys.argv[1:]` is used automatically by `parse_args`.
    """
    parser = build_parser()

    # Enable argument auto-completion.
    argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)
    setup_logging(args.debug)

    console = Console()
    try:
        config = load_config(args.config)
        if args.model:
            config = replace(config, model=args.model)
        api_key = resolve_api_key(config, console)
    except (ConfigError, CredentialError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    os_kind = detect_os_kind()
    context = SessionContext(
        api_key=api_key,
        os_kind=os_kind,
        shell_version=detect_shell_version(os_kind),
    )
    client = LLMClient(
        api_key,
        provider=config.provider,
        base_url=config.base_url,
        timeout=config.request_timeout,
    )
    ShellSession(context, config, client, debug=args.debug, console=console).run()


def main():
    """The main entry point for the command-line interface, called by the `shellscribe` script."""
    run_cli()


if __name__ == "__main__":
    main()
