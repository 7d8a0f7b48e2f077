"""Tests for settings loading."""

import pytest

from courtrecords.config import ConfigurationError, load_settings, providers_in_use
from courtrecords.models.search import ProviderId


def test_no_credentials_fails_fast():
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings({})

    message = str(exc_info.value)
    assert "KLEOPATRA_API_KEY" in message
    assert "NAPIX_API_KEY" in message


def test_shared_key_covers_every_routable_provider():
    settings = load_settings({"COURT_API_KEY": "shared"})

    assert set(settings.providers) == set(providers_in_use())
    assert ProviderId.ECOURTS_PORTAL not in settings.providers
    assert all(p.api_key == "shared" for p in settings.providers.values())


def test_provider_key_and_url_override_shared():
    settings = load_settings({
        "COURT_API_KEY": "shared",
        "KLEOPATRA_API_KEY": "own",
        "KLEOPATRA_BASE_URL": "http://localhost:9000/",
    })

    kleopatra = settings.provider(ProviderId.KLEOPATRA)
    assert kleopatra.api_key == "own"
    assert kleopatra.base_url == "http://localhost:9000"
    assert settings.provider(ProviderId.NAPIX).api_key == "shared"


def test_one_missing_key_is_reported():
    env = {f"{name}_API_KEY": "k" for name in ("KLEOPATRA", "ECOURTS_V17", "PHOENIX")}

    with pytest.raises(ConfigurationError, match="NAPIX_API_KEY") as exc_info:
        load_settings(env)

    assert "ECOURTS_PORTAL" not in str(exc_info.value)


def test_placeholder_provider_needs_no_credential():
    env = {f"{name}_API_KEY": "k" for name in ("KLEOPATRA", "ECOURTS_V17", "PHOENIX", "NAPIX")}

    settings = load_settings(env)

    assert ProviderId.ECOURTS_PORTAL not in settings.providers
    assert settings.provider(ProviderId.NAPIX).api_key == "k"


def test_credentials_stay_out_of_repr():
    settings = load_settings({"COURT_API_KEY": "secret-token"})

    assert "secret-token" not in repr(settings)


def test_timeouts_from_environment():
    settings = load_settings({
        "COURT_API_KEY": "k",
        "COURT_API_TIMEOUT": "60",
        "COURT_API_SEARCH_TIMEOUT": "15.5",
        "COURT_API_DEADLINE": "90",
    })

    assert settings.lookup_timeout == 60.0
    assert settings.search_timeout == 15.5
    assert settings.request_deadline == 90.0
    assert settings.reference_timeout == 10.0


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_bad_timeouts_are_rejected(value):
    with pytest.raises(ConfigurationError):
        load_settings({"COURT_API_KEY": "k", "COURT_API_TIMEOUT": value})
