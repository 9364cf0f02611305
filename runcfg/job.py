"""Configuration of a Cloud Run job, read from its environment."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass

from runcfg.env import _first_text, _parse_unsigned
from runcfg.errors import EnvironmentProcessError

_UINT_BITS = 32

_TEXT_FIELDS = (
    ("name", "CLOUD_RUN_JOB"),
    ("execution", "CLOUD_RUN_EXECUTION"),
)

_COUNT_FIELDS = (
    ("task_index", "CLOUD_RUN_TASK_INDEX"),
    ("task_attempt", "CLOUD_RUN_TASK_ATTEMPT"),
    ("task_count", "CLOUD_RUN_TASK_COUNT"),
)


@dataclass
class Job:
    """Environment exposed to the tasks of a Cloud Run job."""

    name: str = ""
    execution: str = ""
    task_index: int = 0
    task_attempt: int = 0
    task_count: int = 1

    def reload(self) -> None:
        """Update fields from the environment, keeping those that are unset there.

        Raises EnvironmentProcessError when a numeric variable is malformed.
        """
        for attr, var in _TEXT_FIELDS:
            if value := os.environ.get(var):
                setattr(self, attr, value)

        for attr, var in _COUNT_FIELDS:
            if text := os.environ.get(var):
                try:
                    number = _parse_unsigned(text, _UINT_BITS)
                except ValueError as exc:
                    raise EnvironmentProcessError(f"invalid {var} value: {exc}") from exc
                setattr(self, attr, number)

    def env_decode(self, value: str) -> None:
        """Fill missing defaults, then reload from the environment."""
        if self.task_count == 0:
            self.task_count = 1
        self.reload()


def _check_unsigned(label: str, number: int) -> int:
    if not 0 <= number < 1 << _UINT_BITS:
        raise ValueError(f"{label} must be between 0 and {(1 << _UINT_BITS) - 1}")
    return number


def load_job(
    *,
    name: str | Iterable[str] | None = None,
    execution: str | Iterable[str] | None = None,
    task_index: int | None = None,
    task_attempt: int | None = None,
    task_count: int | None = None,
) -> Job:
    """Build a Job from defaults and the environment.

    ``name`` and ``execution`` may be several candidates; the first non-empty
    one is the default. Environment variables take precedence over defaults.
    """
    job = Job()
    if chosen := _first_text(name):
        job.name = chosen
    if chosen := _first_text(execution):
        job.execution = chosen
    if task_index is not None:
        job.task_index = _check_unsigned("task_index", task_index)
    if task_attempt is not None:
        job.task_attempt = _check_unsigned("task_attempt", task_attempt)
    if task_count is not None:
        job.task_count = _check_unsigned("task_count", task_count)
    job.reload()
    return job