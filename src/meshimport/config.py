"""
Client configuration.

Settings come from, in order of precedence: explicit arguments, a YAML
context file, environment variables, defaults.

Context file format:
    contexts:
      local:
        endpoint: http://localhost:9081
        token: default
    current-context: local
    tokens:
      - name: default
        location: auth.json   # relative to the config file

The token file is JSON: {"token": "...", "meshery-provider": "..."}.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import orjson
import yaml  # type: ignore[import-untyped]

DEFAULT_BASE_URL = "http://localhost:9081"
DEFAULT_CONFIG_PATH = Path.home() / ".meshery" / "config.yaml"

ENV_BASE_URL = "MESHERY_SERVER_URL"
ENV_TOKEN = "MESHERY_TOKEN"
ENV_PROVIDER = "MESHERY_PROVIDER"


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""


@dataclass
class RegistryClientConfig:
    """Registration client configuration."""

    base_url: str = ""  # From MESHERY_SERVER_URL env var
    timeout_s: float = 60.0
    headers: dict[str, str] = field(default_factory=dict)
    token: str = ""  # From MESHERY_TOKEN env var
    provider: str = ""  # From MESHERY_PROVIDER env var

    def __post_init__(self) -> None:
        if not self.base_url:
            self.base_url = os.environ.get(ENV_BASE_URL, DEFAULT_BASE_URL)
        if not self.token:
            self.token = os.environ.get(ENV_TOKEN, "")
        if not self.provider:
            self.provider = os.environ.get(ENV_PROVIDER, "")

        self.base_url = self.base_url.rstrip("/")
        if not self.base_url.startswith(("http://", "https://")):
            msg = f"base_url must start with http:// or https://, got {self.base_url!r}"
            raise ValueError(msg)
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be > 0, got {self.timeout_s}")

    @property
    def cookies(self) -> dict[str, str]:
        """Session cookies the server uses for authentication."""
        cookies: dict[str, str] = {}
        if self.token:
            cookies["token"] = self.token
        if self.provider:
            cookies["meshery-provider"] = self.provider
        return cookies


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _load_token(config_dir: Path, tokens: Any, token_name: str) -> tuple[str, str]:
    """Resolve a named token entry to (token, provider)."""
    if not isinstance(tokens, list):
        raise ConfigError(f"Token {token_name!r} referenced but no tokens are defined")

    for entry in tokens:
        if isinstance(entry, dict) and entry.get("name") == token_name:
            location = entry.get("location")
            if not isinstance(location, str) or not location:
                raise ConfigError(f"Token {token_name!r} has no location")
            token_path = Path(location).expanduser()
            if not token_path.is_absolute():
                token_path = config_dir / token_path
            try:
                token_data = orjson.loads(token_path.read_bytes())
            except (OSError, orjson.JSONDecodeError) as e:
                raise ConfigError(f"Could not read token file {token_path}: {e}") from e
            if not isinstance(token_data, dict):
                raise ConfigError(f"Token file {token_path} must contain an object")
            return str(token_data.get("token", "")), str(token_data.get("meshery-provider", ""))

    raise ConfigError(f"Token {token_name!r} not found in config")


def load_config(
    path: Path | None = None,
    *,
    context: str | None = None,
    timeout_s: float = 60.0,
) -> RegistryClientConfig:
    """Load client configuration from a YAML context file.

    Args:
        path: Config file (default ~/.meshery/config.yaml).
        context: Context name (default: current-context from the file).
        timeout_s: Request timeout.

    Returns:
        Client configuration for the selected context.

    Raises:
        ConfigError: If the file, context or token cannot be resolved.
    """
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    data = _load_yaml(path)

    context_name = context or data.get("current-context")
    if not context_name:
        raise ConfigError(f"No context selected and no current-context in {path}")

    contexts = data.get("contexts")
    if not isinstance(contexts, dict) or context_name not in contexts:
        raise ConfigError(f"Context {context_name!r} not found in {path}")

    ctx = contexts[context_name]
    if not isinstance(ctx, dict):
        raise ConfigError(f"Context {context_name!r} must be a mapping")

    endpoint = ctx.get("endpoint") or ""
    if not isinstance(endpoint, str):
        raise ConfigError(f"Context {context_name!r} endpoint must be a string")

    token, provider = "", ""
    token_name = ctx.get("token")
    if token_name:
        token, provider = _load_token(path.parent, data.get("tokens"), str(token_name))

    try:
        return RegistryClientConfig(
            base_url=endpoint,
            timeout_s=timeout_s,
            token=token,
            provider=provider,
        )
    except ValueError as e:
        raise ConfigError(f"Invalid context {context_name!r}: {e}") from e
