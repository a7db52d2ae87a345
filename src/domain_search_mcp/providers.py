"""
Domain Availability Providers

Each provider wraps one third-party availability API and maps its payload
onto the common DomainSearchResult shape:

- Vercel registrar API (bearer token, optional team id, includes pricing)
- API Ninjas domain API (API key, availability only)
- RapidAPI Domains API (API key + host, availability only)

Providers raise ProviderError for every failure (non-2xx status, network
error, timeout, malformed payload) so the resolver can fall back to the
next one.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from .config import DEFAULT_RAPIDAPI_HOST

logger = logging.getLogger(__name__)

VERCEL_API_URL = "https://api.vercel.com"
API_NINJAS_URL = "https://api.api-ninjas.com/v1/domain"
API_NINJAS_WHOIS_URL = "https://api.api-ninjas.com/v1/whois"

# RapidAPI "availability" values
RAPIDAPI_AVAILABLE = "available"
RAPIDAPI_TAKEN = ("taken", "registered", "unavailable")


@dataclass(frozen=True)
class DomainSearchResult:
    """Result of a domain availability check."""
    domain: str
    available: bool
    price: float | None = None
    currency: str | None = None
    provider: str | None = None
    # Set only on the conservative default returned when no provider answered
    degraded: bool = False
    tried_providers: tuple[str, ...] = field(default=())

    @classmethod
    def unknown(cls, domain: str, tried_providers: tuple[str, ...] = ()) -> "DomainSearchResult":
        """Default for a domain no provider could answer. Not a confirmed "taken"."""
        return cls(domain=domain, available=False, degraded=True, tried_providers=tried_providers)

    @property
    def tld(self) -> str:
        return self.domain.rsplit(".", 1)[-1].lower() if "." in self.domain else ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"domain": self.domain, "available": self.available}
        if self.price is not None:
            data["price"] = self.price
        if self.currency is not None:
            data["currency"] = self.currency
        if self.provider is not None:
            data["provider"] = self.provider
        if self.degraded:
            data["degraded"] = True
            data["triedProviders"] = list(self.tried_providers)
        return data


class ProviderError(Exception):
    """A provider could not produce a result for a domain."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


@runtime_checkable
class AvailabilityProvider(Protocol):
    """Anything with a name, an enabled flag and an async check()."""

    name: str
    enabled: bool

    async def check(self, domain: str) -> DomainSearchResult:
        ...


async def _get_json(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    *,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """GET a URL and decode its JSON body, translating failures to ProviderError."""
    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        raise ProviderError(provider, f"HTTP {e.response.status_code}") from e
    except httpx.TimeoutException as e:
        raise ProviderError(provider, "request timed out") from e
    except httpx.HTTPError as e:
        raise ProviderError(provider, f"request failed: {str(e)[:100]}") from e
    except ValueError as e:
        raise ProviderError(provider, f"invalid JSON: {e}") from e


def _expect_object(provider: str, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ProviderError(provider, f"unexpected payload type {type(data).__name__}")
    return data


def normalize_available(payload: dict[str, Any]) -> bool:
    """Vercel and API Ninjas: available only if the field is boolean true."""
    return payload.get("available") is True


def normalize_rapidapi(payload: dict[str, Any]) -> bool:
    """
    RapidAPI Domains returns {"availability": "available" | "taken" | ...}.

    Unknown availability values fall back to a boolean "available" field,
    and to False when that is missing too.
    """
    availability = payload.get("availability")
    if availability == RAPIDAPI_AVAILABLE:
        return True
    if availability in RAPIDAPI_TAKEN:
        return False
    available = payload.get("available")
    if isinstance(available, bool):
        return available
    return False


def _parse_price(value: Any) -> float | None:
    """Numeric or numeric-string price. NaN and infinities are dropped."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        price = float(value)
    elif isinstance(value, str):
        try:
            price = float(value)
        except ValueError:
            return None
    else:
        return None
    return price if math.isfinite(price) else None


@dataclass
class VercelProvider:
    """Vercel registrar API. Requires a bearer token."""

    client: httpx.AsyncClient
    token: str
    team_id: str | None = None
    base_url: str = VERCEL_API_URL
    enabled: bool = True

    name = "vercel"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def _team_params(self) -> dict[str, str] | None:
        return {"teamId": self.team_id} if self.team_id else None

    def _domain_url(self, domain: str, endpoint: str) -> str:
        return f"{self.base_url}/v1/registrar/domains/{quote(domain, safe='')}/{endpoint}"

    async def check(self, domain: str) -> DomainSearchResult:
        data = await _get_json(
            self.client,
            self.name,
            self._domain_url(domain, "availability"),
            params=self._team_params(),
            headers=self._headers(),
        )
        available = normalize_available(_expect_object(self.name, data))

        if not available:
            return DomainSearchResult(domain=domain, available=False, provider=self.name)

        price, currency = await self.fetch_price(domain)
        return DomainSearchResult(
            domain=domain,
            available=True,
            price=price,
            currency=currency,
            provider=self.name,
        )

    async def fetch_price(self, domain: str) -> tuple[float | None, str | None]:
        """
        Fetch registration price for an available domain.

        Never raises: a failed lookup just means no price.
        """
        try:
            data = await _get_json(
                self.client,
                self.name,
                self._domain_url(domain, "price"),
                headers=self._headers(),
            )
            data = _expect_object(self.name, data)
        except ProviderError as e:
            logger.warning("Price lookup failed for %s: %s", domain, e)
            return None, None

        currency = data.get("currency")
        return _parse_price(data.get("price")), currency if isinstance(currency, str) else None

    async def supported_tlds(self) -> list[str]:
        """TLDs the registrar can sell, without leading dots."""
        data = await _get_json(
            self.client,
            self.name,
            f"{self.base_url}/v1/registrar/tlds/supported",
            params=self._team_params(),
            headers=self._headers(),
        )
        if not isinstance(data, list):
            raise ProviderError(self.name, "TLD list is not an array")
        return [tld.lstrip(".") for tld in data if isinstance(tld, str) and tld.strip(".")]


@dataclass
class ApiNinjasProvider:
    """API Ninjas domain availability lookup."""

    client: httpx.AsyncClient
    api_key: str
    url: str = API_NINJAS_URL
    whois_url: str = API_NINJAS_WHOIS_URL
    enabled: bool = True

    name = "apininjas"

    async def check(self, domain: str) -> DomainSearchResult:
        data = await _get_json(
            self.client,
            self.name,
            self.url,
            params={"domain": domain},
            headers={"X-Api-Key": self.api_key},
        )
        return DomainSearchResult(
            domain=domain,
            available=normalize_available(_expect_object(self.name, data)),
            provider=self.name,
        )

    async def fetch_whois(self, domain: str) -> dict[str, Any]:
        """WHOIS record for a domain, as returned by API Ninjas."""
        data = await _get_json(
            self.client,
            self.name,
            self.whois_url,
            params={"domain": domain},
            headers={"X-Api-Key": self.api_key},
        )
        return _expect_object(self.name, data)


@dataclass
class RapidApiProvider:
    """RapidAPI Domains API lookup."""

    client: httpx.AsyncClient
    api_key: str
    host: str = DEFAULT_RAPIDAPI_HOST
    enabled: bool = True

    name = "rapidapi"

    async def check(self, domain: str) -> DomainSearchResult:
        data = await _get_json(
            self.client,
            self.name,
            f"https://{self.host}/domains/{quote(domain, safe='')}",
            params={"mode": "standard"},
            headers={
                "X-RapidAPI-Key": self.api_key,
                "X-RapidAPI-Host": self.host,
            },
        )
        return DomainSearchResult(
            domain=domain,
            available=normalize_rapidapi(_expect_object(self.name, data)),
            provider=self.name,
        )
