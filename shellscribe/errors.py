"""Exceptions raised by the assistant.

Every error a single turn can produce derives from `ShellScribeError`, so the
interactive loop only has to catch one type to keep running.
"""

from typing import Optional


class ShellScribeError(Exception):
    """Base class for all assistant errors."""


class ConfigError(ShellScribeError):
    """The configuration file could not be read or holds invalid values."""


class CredentialError(ShellScribeError):
    """No API key was found and none was entered."""


class CompletionError(ShellScribeError):
    """The completion service call failed."""


class TransportError(CompletionError):
    """The request never got a usable answer (network, timeout, API status)."""


class SerializationError(CompletionError):
    """The request or response body could not be encoded or decoded."""


class EmptyResponseError(CompletionError):
    """The service answered without any choices."""


class ClassificationError(ShellScribeError):
    def __init__(self, label: str):
        super().__init__(f"Invalid query type received: {label}")
        self.label = label


class ExecutionError(ShellScribeError):
    """A generated command could not be spawned or exited with a failure."""

    def __init__(self, message: str, output: str = "", returncode: Optional[int] = None):
        super().__init__(message)
        self.output = output
        self.returncode = returncode


class ConfirmationDeclined(ShellScribeError):
    def __init__(self):
        super().__init__("Command execution canceled.")
