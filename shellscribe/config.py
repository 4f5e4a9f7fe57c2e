import json
import logging
import os

from dataclasses import dataclass, fields
from typing import Optional

from aisuite.provider import ProviderFactory
from rich.console import Console
from rich.prompt import Prompt

from .errors import ConfigError, CredentialError
from .shell import OSKind

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.expanduser("~"), ".shellscribe", "config.json")


@dataclass(frozen=True)
class AppConfig:
    """Settings read once at startup from the JSON config file."""

    provider: str = "openai"
    model: str = "gpt-4o"
    base_url: Optional[str] = None
    # None keeps the blocking call unbounded.
    request_timeout: Optional[float] = None
    command_timeout: Optional[float] = None
    api_key_env: str = "OPENAI_API_KEY"


@dataclass(frozen=True)
class SessionContext:
    api_key: str
    os_kind: OSKind
    shell_version: str


def _check_timeout(name: str, value) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"'{name}' must be a positive number or null, got {value!r}.")
    return float(value)


def _check_text(name: str, value, allow_none: bool = False) -> Optional[str]:
    if value is None and allow_none:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{name}' must be a non-empty string, got {value!r}.")
    return value.strip()


def _check_provider(value) -> str:
    provider = _check_text("provider", value)
    supported = ProviderFactory.get_supported_providers()
    if provider not in supported:
        raise ConfigError(
            f"Unknown provider '{provider}'. Supported providers: {', '.join(sorted(supported))}."
        )
    return provider


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Loads the configuration file, falling back to defaults for missing keys.

    An explicit path must exist. The default path is optional: when it is
    missing the built-in defaults are used.

    Raises:
        ConfigError: The file is unreadable, is not a JSON object, or holds
            invalid values.
    """
    config_path = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(config_path):
        if path:
            raise ConfigError(f"Configuration file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return AppConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as config_file:
            data = json.load(config_file)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Error reading or parsing {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a JSON object.")

    known = {f.name for f in fields(AppConfig)}
    ignored = sorted(set(data) - known)
    if ignored:
        logger.debug("Ignoring unknown config keys: %s", ", ".join(ignored))

    defaults = AppConfig()
    return AppConfig(
        provider=_check_provider(data.get("provider", defaults.provider)),
        model=_check_text("model", data.get("model", defaults.model)),
        base_url=_check_text("base_url", data.get("base_url"), allow_none=True),
        request_timeout=_check_timeout("request_timeout", data.get("request_timeout")),
        command_timeout=_check_timeout("command_timeout", data.get("command_timeout")),
        api_key_env=_check_text("api_key_env", data.get("api_key_env", defaults.api_key_env)),
    )


def resolve_api_key(config: AppConfig, console: Optional[Console] = None) -> str:
    """
    Returns the API key from the environment, or asks for it with masked input.

    The entered key is returned to the caller only; the process environment is
    left untouched.
    """
    api_key = os.environ.get(config.api_key_env, "").strip()
    if api_key:
        return api_key

    console = console or Console()
    try:
        api_key = Prompt.ask(
            f"{config.api_key_env} not found in environment. Please enter your API key",
            console=console,
            password=True,
        )
    except (KeyboardInterrupt, EOFError) as e:
        raise CredentialError("API key entry was canceled.") from e

    api_key = (api_key or "").strip()
    if not api_key:
        raise CredentialError("No API key was provided.")
    return api_key
