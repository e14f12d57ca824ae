"""
Credential Providers - where connect() gets credentials from.

A provider returns a mapping of config key -> value for the requested
fields, or None when the user declined (cancelled prompt, nothing set).
The registry treats None and an all-blank mapping the same way: the
connect attempt ends in Disconnected, not Error.
"""

import asyncio
import getpass
import os
import sys
from collections.abc import Callable, Mapping
from typing import Protocol, runtime_checkable

import structlog

from .contracts import CredentialField
from .errors import CredentialValidationError
from .models import ServiceKind

__all__ = [
    "ChainCredentials",
    "CredentialProvider",
    "EnvironmentCredentials",
    "PromptCredentials",
    "StaticCredentials",
]

logger = structlog.get_logger(__name__)


def _print_stderr(message: str) -> None:
    print(message, file=sys.stderr)


@runtime_checkable
class CredentialProvider(Protocol):
    async def acquire(
        self, kind: ServiceKind, fields: tuple[CredentialField, ...]
    ) -> dict[str, str] | None:
        ...


class StaticCredentials:
    """Fixed credentials per kind.

    Example:
        provider = StaticCredentials({ServiceKind.GITHUB: {"token": "ghp_..."}})
    """

    def __init__(self, values: Mapping[ServiceKind | str, Mapping[str, str]] | None = None) -> None:
        self._values = {ServiceKind(k): dict(v) for k, v in (values or {}).items()}

    def set(self, kind: ServiceKind | str, values: Mapping[str, str]) -> None:
        self._values[ServiceKind(kind)] = dict(values)

    async def acquire(
        self, kind: ServiceKind, fields: tuple[CredentialField, ...]
    ) -> dict[str, str] | None:
        values = self._values.get(kind)
        return dict(values) if values is not None else None


class EnvironmentCredentials:
    """Read each field from its environment variable."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    async def acquire(
        self, kind: ServiceKind, fields: tuple[CredentialField, ...]
    ) -> dict[str, str] | None:
        values = {f.key: self._environ[f.env_var] for f in fields if self._environ.get(f.env_var)}
        return values or None


class PromptCredentials:
    """Ask on the terminal; secrets are read without echo.

    EOF, Ctrl-C or an empty answer to a required field cancels the prompt.
    When a `validate(kind, values)` callable is given, answers that fail its
    format check are reported and asked again, up to `attempts` rounds;
    after that the prompt counts as cancelled.

    Example:
        factories = default_factories()
        provider = PromptCredentials(validate=factories.check_credentials)
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        secret_func: Callable[[str], str] = getpass.getpass,
        *,
        validate: Callable[[ServiceKind, dict[str, str]], None] | None = None,
        attempts: int = 3,
        error_func: Callable[[str], None] | None = None,
    ) -> None:
        self._input = input_func
        self._secret = secret_func
        self._validate = validate
        self._attempts = max(1, attempts)
        self._error = error_func or _print_stderr

    def _ask(self, fields: tuple[CredentialField, ...]) -> dict[str, str] | None:
        values = {}
        for field in fields:
            suffix = "" if field.required else " (optional)"
            reader = self._secret if field.secret else self._input
            try:
                answer = reader(f"{field.prompt}{suffix}: ").strip()
            except (EOFError, KeyboardInterrupt):
                return None
            if not answer:
                if field.required:
                    return None
                continue
            values[field.key] = answer
        return values

    def _ask_valid(self, kind: ServiceKind, fields: tuple[CredentialField, ...]) -> dict[str, str] | None:
        for attempt in range(1, self._attempts + 1):
            values = self._ask(fields)
            if values is None or self._validate is None:
                return values
            try:
                self._validate(kind, values)
            except CredentialValidationError as e:
                logger.warning("credential_format_rejected", kind=kind.value, attempt=attempt)
                self._error(e.reason)
                continue
            return values
        return None

    async def acquire(
        self, kind: ServiceKind, fields: tuple[CredentialField, ...]
    ) -> dict[str, str] | None:
        values = await asyncio.to_thread(self._ask_valid, kind, fields)
        if values is None:
            logger.info("credential_prompt_cancelled", kind=kind.value)
        return values


class ChainCredentials:
    """First provider that returns credentials wins."""

    def __init__(self, *providers: CredentialProvider) -> None:
        self._providers = providers

    async def acquire(
        self, kind: ServiceKind, fields: tuple[CredentialField, ...]
    ) -> dict[str, str] | None:
        for provider in self._providers:
            values = await provider.acquire(kind, fields)
            if values:
                return values
        return None
