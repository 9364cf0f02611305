"""Configuration of a Cloud Run service, read from its environment."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass

from runcfg.env import _first_text, _parse_unsigned
from runcfg.errors import EnvironmentProcessError, InvalidPortError, RuncfgError

DEFAULT_PORT = 8080
_PORT_BITS = 16
_MAX_PORT = (1 << _PORT_BITS) - 1

_TEXT_FIELDS = (
    ("name", "K_SERVICE"),
    ("revision", "K_REVISION"),
    ("configuration", "K_CONFIGURATION"),
)


class _MalformedPortError(InvalidPortError, EnvironmentProcessError):
    """The PORT value is not a decimal 16-bit number."""


def parse_port(text: str) -> int:
    """Parse a port number between 1 and 65535.

    Raises an InvalidPortError for zero, and an error that is both an
    InvalidPortError and an EnvironmentProcessError for malformed text.
    """
    try:
        port = _parse_unsigned(text, _PORT_BITS)
    except ValueError as exc:
        raise _MalformedPortError(str(exc)) from exc
    if port == 0:
        raise InvalidPortError("PORT value cannot be 0")
    return port


@dataclass
class Service:
    """Environment exposed to the containers of a Cloud Run service."""

    port: int = DEFAULT_PORT
    name: str = ""
    revision: str = ""
    configuration: str = ""

    def reload(self) -> None:
        """Update fields from the environment, keeping those that are unset there."""
        for attr, var in _TEXT_FIELDS:
            if value := os.environ.get(var):
                setattr(self, attr, value)

        if text := os.environ.get("PORT"):
            self.port = parse_port(text)

    def env_decode(self, value: str) -> None:
        """Fill missing defaults, then reload from the environment."""
        if self.port == 0:
            self.port = DEFAULT_PORT
        self.reload()


def _default_port(candidates: int | str | Iterable[int | str]) -> int | None:
    if isinstance(candidates, (int, str)):
        candidates = (candidates,)
    for candidate in candidates:
        if isinstance(candidate, str):
            if not candidate:
                continue
            try:
                return parse_port(candidate)
            except RuncfgError:
                continue
        if not 0 <= candidate <= _MAX_PORT:
            raise ValueError(f"port must be between 0 and {_MAX_PORT}")
        if candidate:
            return candidate
    return None


def load_service(
    *,
    port: int | str | Iterable[int | str] | None = None,
    name: str | Iterable[str] | None = None,
    revision: str | Iterable[str] | None = None,
    configuration: str | Iterable[str] | None = None,
) -> Service:
    """Build a Service from defaults and the environment.

    Each default may be several candidates; the first usable one is taken.
    Port candidates that are zero, empty or not valid numbers are skipped.
    Environment variables take precedence over defaults.
    """
    service = Service()
    if port is not None and (chosen_port := _default_port(port)):
        service.port = chosen_port
    if chosen := _first_text(name):
        service.name = chosen
    if chosen := _first_text(revision):
        service.revision = chosen
    if chosen := _first_text(configuration):
        service.configuration = chosen
    service.reload()
    return service