"""Instance metadata of a Cloud Run container, from the metadata server or the environment."""

from __future__ import annotations

import enum
import os
import urllib.error
import urllib.request
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from runcfg.env import _first_text, get_first_env
from runcfg.errors import MetadataFetchError, RuncfgError


class MetadataField(enum.IntFlag):
    """Metadata fields that can be fetched from the metadata server."""

    NONE = 0
    PROJECT_ID = 1 << 1
    PROJECT_NUMBER = 1 << 2
    REGION = 1 << 3
    INSTANCE_ID = 1 << 4
    SERVICE_ACCOUNT_EMAIL = 1 << 5
    ALL = PROJECT_ID | PROJECT_NUMBER | REGION | INSTANCE_ID | SERVICE_ACCOUNT_EMAIL


# Environment variables checked in order for each field; the first non-empty wins.
ENV_PROJECT_ID = ("CLOUDSDK_CORE_PROJECT", "GOOGLE_CLOUD_PROJECT_ID", "GCP_PROJECT_ID")
ENV_PROJECT_NUMBER = ("GOOGLE_CLOUD_PROJECT_NUMBER", "GCP_PROJECT_NUMBER")
ENV_REGION = ("CLOUDSDK_COMPUTE_REGION", "GOOGLE_CLOUD_REGION", "GCP_REGION")
ENV_INSTANCE_ID = ("CLOUD_RUN_INSTANCE_ID",)
ENV_SERVICE_ACCOUNT_EMAIL = ("GOOGLE_SERVICE_ACCOUNT_EMAIL",)

_HOST_ENV = "GCE_METADATA_HOST"
_DEFAULT_HOST = "169.254.169.254"
_PROJECT_PREFIX = "projects/"


class MetadataClient:
    """Minimal client for the instance metadata server."""

    def __init__(self, host: str | None = None, *, timeout: float = 5.0) -> None:
        self.host = host or os.environ.get(_HOST_ENV) or _DEFAULT_HOST
        self.timeout = timeout
        # The metadata server is link-local; never route it through a proxy.
        self._opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))

    def get(self, path: str) -> str:
        """Return the raw value stored under ``path``."""
        path = path.lstrip("/")
        url = f"http://{self.host}/computeMetadata/v1/{path}"
        request = urllib.request.Request(url, headers={"Metadata-Flavor": "Google"})
        try:
            with self._opener.open(request, timeout=self.timeout) as response:
                return response.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            if exc.code == 404:
                raise MetadataFetchError(f"metadata {path!r} not defined") from exc
            raise MetadataFetchError(f"metadata {path!r} returned status {exc.code}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise MetadataFetchError(f"metadata {path!r}: {exc}") from exc

    def project_id(self) -> str:
        return self.get("project/project-id").strip()

    def numeric_project_id(self) -> str:
        return self.get("project/numeric-project-id").strip()

    def instance_id(self) -> str:
        return self.get("instance/id").strip()

    def email(self, service_account: str) -> str:
        return self.get(f"instance/service-accounts/{service_account}/email").strip()


def _project_number_from_region(region_path: str) -> str:
    rest = region_path[len(_PROJECT_PREFIX):]
    number, slash, _ = rest.partition("/")
    if not slash:
        raise MetadataFetchError(f"unexpected region format {region_path!r}")
    return number


def _describe(exc: BaseException) -> str:
    if isinstance(exc, RuncfgError) and exc.detail:
        return exc.detail
    return str(exc)


@dataclass
class Metadata:
    """Project, region, instance and identity of the running container."""

    project_id: str = ""
    project_number: str = ""
    region: str = ""
    instance_id: str = ""
    service_account_email: str = ""

    def reload(self, fields: MetadataField | int, client: MetadataClient | None = None) -> None:
        """Fetch the requested fields from the metadata server, concurrently.

        Fields not requested keep their current values. Raises
        MetadataFetchError when any request fails.
        """
        client = client if client is not None else MetadataClient()
        tasks: list[tuple[str, Callable[[], dict[str, str]]]] = []

        if fields & MetadataField.PROJECT_ID:
            tasks.append(("project ID", lambda: {"project_id": client.project_id()}))

        if fields & MetadataField.REGION:
            want_number = bool(fields & MetadataField.PROJECT_NUMBER)

            def fetch_region() -> dict[str, str]:
                # Returned as projects/{number}/regions/{name}.
                response = client.get("instance/region")
                values = {"region": response.rpartition("/")[2]}
                if want_number:
                    values["project_number"] = _project_number_from_region(response)
                return values

            tasks.append(("region", fetch_region))
        elif fields & MetadataField.PROJECT_NUMBER:
            tasks.append(
                ("project number", lambda: {"project_number": client.numeric_project_id()})
            )

        if fields & MetadataField.INSTANCE_ID:
            tasks.append(("instance ID", lambda: {"instance_id": client.instance_id()}))

        if fields & MetadataField.SERVICE_ACCOUNT_EMAIL:
            tasks.append(
                (
                    "service account email",
                    lambda: {"service_account_email": client.email("default")},
                )
            )

        if not tasks:
            return

        with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
            futures = [(label, pool.submit(task)) for label, task in tasks]

        failures: list[tuple[str, BaseException]] = []
        for label, future in futures:
            exc = future.exception()
            if exc is not None:
                failures.append((label, exc))
                continue
            for attr, value in future.result().items():
                setattr(self, attr, value)

        if failures:
            label, exc = failures[0]
            raise MetadataFetchError(f"failed to fetch {label}: {_describe(exc)}") from exc

    def env_decode(self, value: str, client: MetadataClient | None = None) -> None:
        """Fill empty fields from the environment, fetching the rest from the server."""
        defaults = default_metadata()
        fields = MetadataField.NONE
        for attr, flag in (
            ("project_id", MetadataField.PROJECT_ID),
            ("project_number", MetadataField.PROJECT_NUMBER),
            ("region", MetadataField.REGION),
            ("instance_id", MetadataField.INSTANCE_ID),
            ("service_account_email", MetadataField.SERVICE_ACCOUNT_EMAIL),
        ):
            if getattr(self, attr):
                continue
            if default := getattr(defaults, attr):
                setattr(self, attr, default)
            else:
                fields |= flag
        self.reload(fields, client)


def default_metadata() -> Metadata:
    """Build Metadata from the environment variables listed for each field."""
    return Metadata(
        project_id=get_first_env(*ENV_PROJECT_ID),
        project_number=get_first_env(*ENV_PROJECT_NUMBER),
        region=get_first_env(*ENV_REGION),
        instance_id=get_first_env(*ENV_INSTANCE_ID),
        service_account_email=get_first_env(*ENV_SERVICE_ACCOUNT_EMAIL),
    )


def load_metadata(
    fields: MetadataField | int,
    *,
    client: MetadataClient | None = None,
    project_id: str | Iterable[str] | None = None,
    project_number: str | Iterable[str] | None = None,
    region: str | Iterable[str] | None = None,
    instance_id: str | Iterable[str] | None = None,
    service_account_email: str | Iterable[str] | None = None,
) -> Metadata:
    """Build Metadata from the environment, explicit defaults and the server.

    Explicit defaults replace environment values; fields named in ``fields``
    are then fetched from the metadata server and replace both.
    """
    metadata = default_metadata()
    for attr, candidates in (
        ("project_id", project_id),
        ("project_number", project_number),
        ("region", region),
        ("instance_id", instance_id),
        ("service_account_email", service_account_email),
    ):
        if chosen := _first_text(candidates):
            setattr(metadata, attr, chosen)
    metadata.reload(fields, client)
    return metadata