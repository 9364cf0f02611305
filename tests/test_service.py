import pytest

from runcfg.errors import EnvironmentProcessError, InvalidPortError
from runcfg.service import Service, load_service, parse_port

SERVICE_VARS = ("PORT", "K_SERVICE", "K_REVISION", "K_CONFIGURATION")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in SERVICE_VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    assert load_service() == Service(port=8080, name="", revision="", configuration="")


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("K_SERVICE", "api")
    monkeypatch.setenv("K_REVISION", "api-00001")
    monkeypatch.setenv("K_CONFIGURATION", "api-config")
    service = load_service(port=3000, name="fallback", revision="r", configuration="c")
    assert service == Service(
        port=int("9000"), name="api", revision="api-00001", configuration="api-config"
    )


def test_defaults_used_when_environment_unset():
    service = load_service(port=3000, name="svc", revision=["", "rev"], configuration="conf")
    assert service == Service(port=3000, name="svc", revision="rev", configuration="conf")


def test_first_non_zero_port_is_used():
    assert load_service(port=[0, 3000, 4000]).port == 3000


def test_port_strings_skip_invalid_and_zero():
    assert load_service(port=["", "abc", "0", "70000", "9090", "1234"]).port == 9090


def test_mixed_port_candidates():
    assert load_service(port=[0, "", "5000"]).port == 5000


def test_unusable_port_candidates_keep_default():
    assert load_service(port=["", "0", 0]).port == 8080


def test_out_of_range_integer_default_is_rejected():
    with pytest.raises(ValueError):
        load_service(port=70000)


def test_parse_port_accepts_valid_numbers():
    assert parse_port("1") == 1
    assert parse_port("65535") == int("65535")


def test_parse_port_zero_is_invalid_port_only():
    with pytest.raises(InvalidPortError) as excinfo:
        parse_port("0")
    assert not isinstance(excinfo.value, EnvironmentProcessError)
    assert str(excinfo.value) == "invalid PORT value: PORT value cannot be 0"


@pytest.mark.parametrize("text", ["abc", "65536", "-1", "+80", " 80", "8_0", ""])
def test_parse_port_malformed_is_both_errors(text):
    with pytest.raises(InvalidPortError) as excinfo:
        parse_port(text)
    assert isinstance(excinfo.value, EnvironmentProcessError)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_zero_port_in_environment_raises(monkeypatch):
    monkeypatch.setenv("PORT", "0")
    with pytest.raises(InvalidPortError):
        load_service()


def test_malformed_port_in_environment_raises(monkeypatch):
    monkeypatch.setenv("PORT", "http")
    with pytest.raises(EnvironmentProcessError):
        load_service()


def test_reload_keeps_values_unset_in_environment():
    service = Service(port=1234, name="kept", revision="rev", configuration="conf")
    service.reload()
    assert service == Service(port=1234, name="kept", revision="rev", configuration="conf")


def test_reload_updates_only_set_values(monkeypatch):
    monkeypatch.setenv("K_REVISION", "new-rev")
    service = Service(port=1234, name="kept")
    service.reload()
    assert service == Service(port=1234, name="kept", revision="new-rev")


def test_env_decode_fills_zero_port():
    service = Service(port=0, name="kept")
    service.env_decode("")
    assert service == Service(port=8080, name="kept")


def test_env_decode_keeps_existing_port(monkeypatch):
    monkeypatch.setenv("K_SERVICE", "from-env")
    service = Service(port=5555, name="preset")
    service.env_decode("ignored")
    assert service == Service(port=5555, name="from-env")


def test_env_decode_raises_on_invalid_port(monkeypatch):
    monkeypatch.setenv("PORT", "0")
    with pytest.raises(InvalidPortError):
        Service().env_decode("")