# tests/test_settings.py
import os

import pytest

from stravaprobe.errors import ConfigurationError
from stravaprobe.settings import DEFAULT_REDIRECT_URI, get_settings, load_env


def test_defaults_with_empty_env(clean_env):
    s = get_settings()
    assert s.client_id is None and s.client_secret is None and s.access_token is None
    assert s.redirect_uri == DEFAULT_REDIRECT_URI
    assert s.http_timeout == 15.0
    assert s.log_level == "INFO"
    assert not s.has_client_credentials


def test_blank_values_count_as_unset(clean_env, monkeypatch):
    monkeypatch.setenv("STRAVA_ACCESS_TOKEN", "   ")
    monkeypatch.setenv("STRAVA_CLIENT_ID", " 4711 ")
    s = get_settings()
    assert s.access_token is None
    assert s.client_id == "4711"


@pytest.mark.parametrize("value", ["abc", "0", "-3", "nan", "inf"])
def test_invalid_timeout_is_configuration_error(clean_env, monkeypatch, value):
    monkeypatch.setenv("STRAVA_HTTP_TIMEOUT", value)
    with pytest.raises(ConfigurationError):
        get_settings()


def test_load_env_does_not_override_existing(clean_env, monkeypatch):
    (clean_env / ".env").write_text(
        "STRAVA_CLIENT_ID=from_file\nSTRAVA_CLIENT_SECRET=secret_file\n", encoding="utf-8"
    )
    monkeypatch.setenv("STRAVA_CLIENT_ID", "from_env")
    # load_dotenv skriver direkte til os.environ; monkeypatch rydder opp etterpå
    monkeypatch.setenv("STRAVA_CLIENT_SECRET", "placeholder")
    monkeypatch.delenv("STRAVA_CLIENT_SECRET")

    assert load_env() is True
    assert os.environ["STRAVA_CLIENT_ID"] == "from_env"
    assert os.environ["STRAVA_CLIENT_SECRET"] == "secret_file"


def test_load_env_without_file(clean_env):
    assert load_env() is False


def test_load_env_explicit_path(clean_env, monkeypatch, tmp_path):
    p = tmp_path / "custom.env"
    p.write_text("STRAVA_ACCESS_TOKEN=tok_custom\n", encoding="utf-8")
    monkeypatch.setenv("STRAVA_ACCESS_TOKEN", "placeholder")
    monkeypatch.delenv("STRAVA_ACCESS_TOKEN")

    assert load_env(str(p)) is True
    assert get_settings().access_token == "tok_custom"
