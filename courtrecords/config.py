import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from courtrecords.models.search import ProviderId
from courtrecords.providers.endpoints import supported_combinations

PROVIDER_URLS: dict[ProviderId, str] = {
    ProviderId.KLEOPATRA: "https://court-api.kleopatra.io",
    ProviderId.ECOURTS_V17: "https://api.ecourts.gov.in/v17",
    ProviderId.PHOENIX: "https://phoenix.akshit.me",
    ProviderId.NAPIX: "https://napix.gov.in/api/ecourts",
    ProviderId.ECOURTS_PORTAL: "https://services.ecourts.gov.in",
}

# Environment variable prefix per provider, e.g. KLEOPATRA_API_KEY
ENV_PREFIXES: dict[ProviderId, str] = {
    ProviderId.KLEOPATRA: "KLEOPATRA",
    ProviderId.ECOURTS_V17: "ECOURTS_V17",
    ProviderId.PHOENIX: "PHOENIX",
    ProviderId.NAPIX: "NAPIX",
    ProviderId.ECOURTS_PORTAL: "ECOURTS_PORTAL",
}

SHARED_KEY_ENV = "COURT_API_KEY"

LOOKUP_TIMEOUT = 120.0
SEARCH_TIMEOUT = 30.0
REFERENCE_TIMEOUT = 10.0
REQUEST_DEADLINE = 300.0

RETRY_BASE_DELAY = 0.3
MAX_RETRIES = 3

USER_AGENT = "courtrecords/0.3"


class ConfigurationError(RuntimeError):
    """Raised at startup when the environment cannot produce usable settings."""


@dataclass(frozen=True)
class ProviderSettings:
    provider: ProviderId
    base_url: str
    api_key: str = field(repr=False)


@dataclass(frozen=True)
class Settings:
    providers: Mapping[ProviderId, ProviderSettings]
    lookup_timeout: float = LOOKUP_TIMEOUT
    search_timeout: float = SEARCH_TIMEOUT
    reference_timeout: float = REFERENCE_TIMEOUT
    request_deadline: float = REQUEST_DEADLINE
    retry_base_delay: float = RETRY_BASE_DELAY
    max_retries: int = MAX_RETRIES

    def provider(self, provider: ProviderId) -> ProviderSettings:
        return self.providers[provider]


def providers_in_use() -> list[ProviderId]:
    """Providers with at least one routable endpoint, in configuration order."""
    routed = {provider for provider, _, _ in supported_combinations()}
    return [provider for provider in ENV_PREFIXES if provider in routed]


def _read_seconds(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from environment variables.

    Every provider with a callable endpoint needs a bearer credential
    (placeholder integrations are never called and need none), either its own
    ``<PREFIX>_API_KEY`` or the shared ``COURT_API_KEY``. There is no
    built-in default: a missing key fails here, at startup, instead of on the
    first request.
    """
    env = os.environ if environ is None else environ
    shared_key = env.get(SHARED_KEY_ENV, "").strip()

    providers: dict[ProviderId, ProviderSettings] = {}
    missing: list[str] = []
    for provider in providers_in_use():
        prefix = ENV_PREFIXES[provider]
        api_key = env.get(f"{prefix}_API_KEY", "").strip() or shared_key
        if not api_key:
            missing.append(f"{prefix}_API_KEY")
            continue
        base_url = env.get(f"{prefix}_BASE_URL", "").strip() or PROVIDER_URLS[provider]
        providers[provider] = ProviderSettings(
            provider=provider,
            base_url=base_url.rstrip("/"),
            api_key=api_key,
        )

    if missing:
        raise ConfigurationError(
            f"No credential configured for: {', '.join(missing)} "
            f"(set them individually or set {SHARED_KEY_ENV})"
        )

    return Settings(
        providers=providers,
        lookup_timeout=_read_seconds(env, "COURT_API_TIMEOUT", LOOKUP_TIMEOUT),
        search_timeout=_read_seconds(env, "COURT_API_SEARCH_TIMEOUT", SEARCH_TIMEOUT),
        reference_timeout=_read_seconds(env, "COURT_API_REFERENCE_TIMEOUT", REFERENCE_TIMEOUT),
        request_deadline=_read_seconds(env, "COURT_API_DEADLINE", REQUEST_DEADLINE),
    )
