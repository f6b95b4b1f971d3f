"""
Environment configuration for the tool servers.

Loads a .env file at import time so both servers see the same
variables whether launched from a shell or by an MCP host.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

load_dotenv()

#: Environment variable names
NEUROSIFT_TOOLS_API_URL_ENV = "NEUROSIFT_TOOLS_API_URL"
OPENROUTER_API_KEY_ENV = "OPENROUTER_API_KEY"
PLOT_VISION_MODEL_ENV = "PLOT_VISION_MODEL"
HTTP_TIMEOUT_ENV = "NEUROSIFT_MCP_HTTP_TIMEOUT"
LOG_LEVEL_ENV = "NEUROSIFT_MCP_LOG_LEVEL"

DEFAULT_NEUROSIFT_TOOLS_API_URL = "https://neurosift-chat-agent-tools.vercel.app/api"
DEFAULT_PLOT_VISION_MODEL = "openai/gpt-4o"


class ConfigError(RuntimeError):
    """Raised when the process environment cannot start a server."""


def require_env(var_name: str, env: Mapping[str, str] | None = None) -> str:
    """
    Return the value of an environment variable or raise a clear error.

    Raises:
        ConfigError: If the environment variable is missing or empty.
    """
    env = os.environ if env is None else env
    try:
        value = env[var_name]
    except KeyError as exc:
        raise ConfigError(f"{var_name} environment variable is required") from exc
    if not value:
        raise ConfigError(f"{var_name} environment variable is empty")
    return value


def _http_timeout(env: Mapping[str, str]) -> float | None:
    raw = env.get(HTTP_TIMEOUT_ENV)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{HTTP_TIMEOUT_ENV} must be a number of seconds, got {raw!r}") from exc


@dataclass(frozen=True)
class NeurosiftToolsSettings:
    api_url: str = DEFAULT_NEUROSIFT_TOOLS_API_URL
    http_timeout: float | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "NeurosiftToolsSettings":
        env = os.environ if env is None else env
        return cls(
            api_url=env.get(NEUROSIFT_TOOLS_API_URL_ENV) or DEFAULT_NEUROSIFT_TOOLS_API_URL,
            http_timeout=_http_timeout(env),
        )


@dataclass(frozen=True)
class PlotVisionSettings:
    api_key: str
    model: str = DEFAULT_PLOT_VISION_MODEL
    http_timeout: float | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "PlotVisionSettings":
        """
        Raises:
            ConfigError: If OPENROUTER_API_KEY is not set.
        """
        env = os.environ if env is None else env
        return cls(
            api_key=require_env(OPENROUTER_API_KEY_ENV, env),
            model=env.get(PLOT_VISION_MODEL_ENV) or DEFAULT_PLOT_VISION_MODEL,
            http_timeout=_http_timeout(env),
        )


def configure_logging(level: str | None = None) -> None:
    """Send diagnostics to stderr; stdout carries protocol messages only."""
    level = level or os.getenv(LOG_LEVEL_ENV, "INFO")
    logging.basicConfig(
        level=level.upper(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
