"""
Configuration resolution for the Orca AI MCP server.

A configuration comes from exactly one source per resolution: the project
file ``.orcaai.json`` in the working directory when it exists, otherwise the
``ORCA_*`` environment variables. Both sources go through the same validation
and resolution never raises; callers get ``None`` when nothing usable exists.
"""

import asyncio
import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    StringConstraints,
    ValidationError,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".orcaai.json"
DEFAULT_API_URL = "https://api.orcaai.io"
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 3

ENV_API_URL = "ORCA_API_URL"
ENV_API_TOKEN = "ORCA_API_TOKEN"
ENV_TIMEOUT = "ORCA_TIMEOUT"
ENV_RETRIES = "ORCA_RETRIES"
ENV_TOOLS_HUNT = "ORCA_TOOLS_HUNT"

ApiToken = Annotated[
    str,
    StringConstraints(min_length=40, max_length=40, pattern=r"^[A-Za-z0-9]+$"),
]


@dataclass(frozen=True, slots=True)
class Settings:
    """Fully validated runtime configuration."""

    api_token: str
    api_url: str = DEFAULT_API_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    hunt_enabled: bool = True

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class _ConnectionSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    timeout: PositiveInt = DEFAULT_TIMEOUT_MS
    retries: NonNegativeInt = DEFAULT_MAX_RETRIES


class _ToolFlags(BaseModel):
    model_config = ConfigDict(extra="ignore")

    hunt: bool = True


class _ConfigDocument(BaseModel):
    """Shape shared by the config file and the environment candidate."""

    model_config = ConfigDict(extra="ignore")

    api_url: str = Field(default=DEFAULT_API_URL, alias="apiUrl")
    api_token: ApiToken = Field(alias="apiToken")
    settings: _ConnectionSettings = Field(default_factory=_ConnectionSettings)
    tools: _ToolFlags = Field(default_factory=_ToolFlags)


@dataclass(frozen=True, slots=True)
class SettingsValid:
    settings: Settings


@dataclass(frozen=True, slots=True)
class SettingsInvalid:
    errors: tuple[str, ...]


SettingsValidation = SettingsValid | SettingsInvalid


def validate_settings(raw: object) -> SettingsValidation:
    """
    Validate a raw configuration document.

    Numeric fields accept integers or numeric strings, boolean flags accept
    native booleans or the usual true/false spellings. Returns the field
    errors instead of raising.
    """
    if not isinstance(raw, Mapping):
        return SettingsInvalid(("configuration must be a JSON object",))

    try:
        document = _ConfigDocument.model_validate(dict(raw))
    except ValidationError as exc:
        errors = tuple(
            f"{'.'.join(str(part) for part in error['loc']) or 'configuration'}: {error['msg']}"
            for error in exc.errors()
        )
        return SettingsInvalid(errors)

    return SettingsValid(
        Settings(
            api_token=document.api_token,
            api_url=document.api_url,
            timeout_ms=document.settings.timeout,
            max_retries=document.settings.retries,
            hunt_enabled=document.tools.hunt,
        )
    )


def settings_from_environment(environ: Mapping[str, str]) -> dict[str, Any]:
    """Build a raw configuration candidate from ``ORCA_*`` variables."""

    def _get(name: str) -> str:
        return environ.get(name, "").strip()

    return {
        "apiUrl": _get(ENV_API_URL) or DEFAULT_API_URL,
        "apiToken": _get(ENV_API_TOKEN),
        "settings": {
            "timeout": _get(ENV_TIMEOUT) or DEFAULT_TIMEOUT_MS,
            "retries": _get(ENV_RETRIES) or DEFAULT_MAX_RETRIES,
        },
        # Only the literal "false" switches the tool off.
        "tools": {"hunt": environ.get(ENV_TOOLS_HUNT) != "false"},
    }


def resolve_settings(
    cwd: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings | None:
    """
    Resolve the active configuration, or ``None`` when there is none.

    The config file short-circuits the environment entirely: a file that
    exists but cannot be read, parsed or validated yields ``None`` rather
    than falling back to ``ORCA_*`` variables.
    """
    config_path = (Path.cwd() if cwd is None else Path(cwd)) / CONFIG_FILENAME
    env = os.environ if environ is None else environ

    try:
        if config_path.exists():
            raw: object = json.loads(config_path.read_text(encoding="utf-8"))
            source = str(config_path)
        else:
            raw = settings_from_environment(env)
            source = "environment"
            if not raw["apiToken"]:
                logger.info(
                    "No Orca configuration found",
                    extra={"config_path": str(config_path), "env_var": ENV_API_TOKEN},
                )
                return None
    except (OSError, ValueError) as exc:
        logger.warning("Unable to read Orca configuration from %s: %s", config_path, exc)
        return None

    result = validate_settings(raw)
    if isinstance(result, SettingsInvalid):
        logger.warning(
            "Orca configuration from %s is invalid: %s",
            source,
            "; ".join(result.errors),
        )
        return None

    logger.debug(
        "Resolved Orca configuration",
        extra={"source": source, "api_url": result.settings.api_url},
    )
    return result.settings


async def aresolve_settings(
    cwd: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings | None:
    """``resolve_settings`` with the file read moved off the event loop."""
    return await asyncio.to_thread(resolve_settings, cwd, environ)
