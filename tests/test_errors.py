import pytest

from runcfg.errors import (
    EnvironmentProcessError,
    InvalidPortError,
    MetadataFetchError,
    RuncfgError,
)


@pytest.mark.parametrize(
    "error_type", [EnvironmentProcessError, InvalidPortError, MetadataFetchError]
)
def test_all_errors_share_base(error_type):
    error = error_type("detail")
    assert issubclass(error_type, RuncfgError)
    assert str(error) == f"{error_type.message}: detail"
    assert error.detail == "detail"


@pytest.mark.parametrize(
    ("error_type", "expected"),
    [
        (
            EnvironmentProcessError,
            "failed to process configuration from environment variables",
        ),
        (InvalidPortError, "invalid PORT value"),
        (MetadataFetchError, "failed to fetch metadata from server"),
    ],
)
def test_default_messages(error_type, expected):
    assert str(error_type()) == expected


def test_detail_is_appended_to_message():
    error = InvalidPortError("PORT value cannot be 0")
    assert str(error) == "invalid PORT value: PORT value cannot be 0"
    assert error.detail == "PORT value cannot be 0"


def test_error_kinds_are_distinct():
    error = InvalidPortError()
    assert str(error) == "invalid PORT value"
    assert not isinstance(error, EnvironmentProcessError)
    assert not isinstance(MetadataFetchError(), EnvironmentProcessError)
    assert not issubclass(InvalidPortError, EnvironmentProcessError)
    assert not issubclass(MetadataFetchError, EnvironmentProcessError)


def test_empty_detail_uses_plain_message():
    error = MetadataFetchError("")
    assert str(error) == MetadataFetchError.message