"""
Availability Resolver with Provider Fallback

Tries availability providers one at a time in a fixed priority order
(Vercel, API Ninjas, RapidAPI) and returns the first successful result.
If every provider fails, the domain resolves to a conservative
{available: false} result flagged as degraded instead of raising.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Sequence

import httpx

from .config import PROVIDER_ORDER, ResolverConfig, load_resolver_config
from .providers import (
    ApiNinjasProvider,
    AvailabilityProvider,
    DomainSearchResult,
    ProviderError,
    RapidApiProvider,
    VercelProvider,
)

logger = logging.getLogger(__name__)


def build_client(timeout: float = 10.0) -> httpx.AsyncClient:
    """Shared HTTP client for all providers of one resolver."""
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"Accept": "application/json"},
        follow_redirects=True,
        limits=httpx.Limits(
            max_connections=100,
            max_keepalive_connections=20,
        ),
    )


def build_providers(config: ResolverConfig, client: httpx.AsyncClient) -> list[AvailabilityProvider]:
    """
    Build the provider chain in priority order.

    Providers missing from config.providers, or missing their credentials,
    are left out. A missing credential is not an error.
    """
    chain: list[AvailabilityProvider] = []

    for name in PROVIDER_ORDER:
        if name not in config.providers:
            continue

        if name == "vercel":
            if not config.vercel_token:
                logger.debug("Skipping vercel: no token configured")
                continue
            chain.append(VercelProvider(client, config.vercel_token, team_id=config.vercel_team_id))
        elif name == "apininjas":
            if not config.apininjas_key:
                logger.debug("Skipping apininjas: no API key configured")
                continue
            chain.append(ApiNinjasProvider(client, config.apininjas_key))
        elif name == "rapidapi":
            if not config.rapidapi_key:
                logger.debug("Skipping rapidapi: no API key configured")
                continue
            chain.append(RapidApiProvider(client, config.rapidapi_key, host=config.rapidapi_host))

    return chain


class AvailabilityResolver:
    """
    Resolves domain availability through an ordered provider chain.

    Usage:
        async with AvailabilityResolver(config) as resolver:
            result = await resolver.resolve("example.com")
            results = await resolver.bulk_resolve("example", ["com", "io"])

    An explicit list of providers replaces the chain built from config.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        providers: Sequence[AvailabilityProvider] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or ResolverConfig()
        self._explicit_providers = list(providers) if providers is not None else None
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "AvailabilityResolver":
        if self._client is None and self._explicit_providers is None:
            self._client = build_client(self._config.timeout)
        return self

    async def __aexit__(self, *args) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def providers(self) -> list[AvailabilityProvider]:
        """Enabled providers, highest priority first."""
        if self._explicit_providers is not None:
            return [p for p in self._explicit_providers if p.enabled]

        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        return [p for p in build_providers(self._config, self._client) if p.enabled]

    @property
    def registrar(self) -> VercelProvider | None:
        """The registrar provider, if it is part of the chain."""
        for provider in self.providers:
            if isinstance(provider, VercelProvider):
                return provider
        return None

    async def whois(self, domain: str) -> dict:
        """
        WHOIS record from API Ninjas.

        Raises ProviderError when no API Ninjas key is configured or the
        lookup fails. Unlike resolve() there is nothing to fall back to.
        """
        if not self._config.apininjas_key:
            raise ProviderError(ApiNinjasProvider.name, "API Ninjas key is not configured")

        if self._client is None:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        provider = ApiNinjasProvider(self._client, self._config.apininjas_key)
        return await provider.fetch_whois(domain)

    async def resolve(self, domain: str) -> DomainSearchResult:
        """Check one domain, falling back through the chain. Never raises ProviderError."""
        providers = self.providers
        if not providers:
            logger.warning("No availability providers configured, returning unavailable for %s", domain)
            return DomainSearchResult.unknown(domain)

        tried: list[str] = []
        last_error: ProviderError | None = None

        for provider in providers:
            tried.append(provider.name)
            logger.debug("Trying %s for %s", provider.name, domain)

            try:
                result = await provider.check(domain)
            except ProviderError as e:
                logger.warning("%s failed for %s: %s", provider.name, domain, e.message)
                last_error = e
                continue

            logger.info("%s answered for %s (available=%s)", provider.name, domain, result.available)
            return replace(result, tried_providers=tuple(tried))

        logger.error("All providers failed for %s, last error: %s", domain, last_error)
        return DomainSearchResult.unknown(domain, tried_providers=tuple(tried))

    async def resolve_many(self, domains: Sequence[str]) -> list[DomainSearchResult]:
        """
        Check many domains concurrently.

        All lookups start at once with no concurrency cap. Results keep the
        input order and each domain degrades on its own.
        """
        if not domains:
            return []

        results = await asyncio.gather(*(self.resolve(domain) for domain in domains))
        return list(results)

    async def bulk_resolve(self, base_name: str, tlds: Sequence[str]) -> list[DomainSearchResult]:
        """Check base_name under each TLD, in TLD order."""
        domains = [f"{base_name}.{tld.lstrip('.')}" for tld in tlds]
        return await self.resolve_many(domains)


async def resolve(domain: str, config: ResolverConfig | None = None) -> DomainSearchResult:
    """
    Convenience function for a single lookup without managing the resolver.

    Credentials come from load_resolver_config() when no config is given.
    """
    async with AvailabilityResolver(config or load_resolver_config()) as resolver:
        return await resolver.resolve(domain)


async def bulk_resolve(
    base_name: str,
    tlds: Sequence[str],
    config: ResolverConfig | None = None,
) -> list[DomainSearchResult]:
    """Convenience function for checking one base name across TLDs."""
    async with AvailabilityResolver(config or load_resolver_config()) as resolver:
        return await resolver.bulk_resolve(base_name, tlds)
