import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(debug: bool = False) -> None:
    """Routes the package loggers through rich, on stderr."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=debug,
        rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    package_logger = logging.getLogger("shellscribe")
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    package_logger.propagate = False
