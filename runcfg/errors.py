"""Exception hierarchy raised while loading runtime configuration."""

from __future__ import annotations


class RuncfgError(Exception):
    """Base class for every configuration loading failure."""

    message = "runtime configuration error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class EnvironmentProcessError(RuncfgError):
    """Configuration could not be processed from environment variables."""

    message = "failed to process configuration from environment variables"


class InvalidPortError(RuncfgError):
    """The PORT value is not a port number between 1 and 65535."""

    message = "invalid PORT value"


class MetadataFetchError(RuncfgError):
    """Metadata could not be fetched from the metadata server."""

    message = "failed to fetch metadata from server"