#!/usr/bin/env python3
"""
Test suite for Domain Search MCP Server tools

The tools are called directly; the resolver they build is replaced with
one backed by a fake provider, so no credentials or network are needed.

Usage:
    python -m pytest test_server.py
"""

import asyncio
import json
import sys

import httpx
import pytest

import domain_search_mcp.server as server
from domain_search_mcp.config import ResolverConfig
from domain_search_mcp.providers import DomainSearchResult, ProviderError
from domain_search_mcp.resolver import AvailabilityResolver


def run_sync(coro):
    """Helper to run async coroutines synchronously for tests."""
    return asyncio.run(coro)


class PricedProvider:
    """Provider double with fixed availability and prices."""

    name = "fake"
    enabled = True

    def __init__(self, prices: dict[str, float | None], failing=()):
        self.prices = prices
        self.failing = set(failing)
        self.calls: list[str] = []

    async def check(self, domain):
        self.calls.append(domain)
        if domain in self.failing:
            raise ProviderError(self.name, "down")
        if domain in self.prices:
            price = self.prices[domain]
            return DomainSearchResult(
                domain=domain,
                available=True,
                price=price,
                currency="USD" if price is not None else None,
                provider=self.name,
            )
        return DomainSearchResult(domain=domain, available=False, provider=self.name)


@pytest.fixture
def provider(monkeypatch):
    fake = PricedProvider({"foo.io": 40.0, "foo.dev": 12.5, "foobar.com": None}, failing={"foo.org"})
    monkeypatch.setattr(server, "make_resolver", lambda: AvailabilityResolver(providers=[fake]))
    return fake


# =============================================================================
# version
# =============================================================================

def test_version():
    assert server.version() == f"Domain Search MCP Server version {server.VERSION}"


def test_tools_are_registered():
    tools = run_sync(server.mcp.list_tools())
    assert {t.name for t in tools} == {
        "version",
        "check_domain",
        "whois_lookup",
        "check_domains",
        "search_domains",
        "get_supported_tlds",
        "suggest_domains",
        "get_registration_links",
    }


# =============================================================================
# check_domain
# =============================================================================

def test_check_domain(provider):
    data = json.loads(run_sync(server.check_domain("  FOO.IO ")))
    assert data == {"domain": "foo.io", "available": True, "price": 40.0, "currency": "USD", "provider": "fake"}
    assert provider.calls == ["foo.io"]


def test_check_domain_degraded(provider):
    data = json.loads(run_sync(server.check_domain("foo.org")))
    assert data["available"] is False
    assert data["degraded"] is True
    assert data["triedProviders"] == ["fake"]


def test_check_domain_empty(provider):
    assert "error" in json.loads(run_sync(server.check_domain("  ")))
    assert provider.calls == []


# =============================================================================
# whois_lookup
# =============================================================================

def use_whois_backend(monkeypatch, handler, api_key="ninja-key"):
    """Serve API Ninjas WHOIS requests from a mock transport."""
    monkeypatch.setattr(server, "make_resolver", lambda: AvailabilityResolver(
        ResolverConfig(apininjas_key=api_key),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    ))


def test_whois_lookup(monkeypatch):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"domain_name": "foo.com", "registrar": "Example Registrar"})

    use_whois_backend(monkeypatch, handler)
    data = json.loads(run_sync(server.whois_lookup(" Foo.com ")))

    assert data == {"domain": "foo.com", "whois": {"domain_name": "foo.com", "registrar": "Example Registrar"}}
    assert requests[0].url.path == "/v1/whois"
    assert requests[0].url.params["domain"] == "foo.com"
    assert requests[0].headers["X-Api-Key"] == "ninja-key"


def test_whois_lookup_failure_returns_error(monkeypatch):
    use_whois_backend(monkeypatch, lambda request: httpx.Response(503))
    assert json.loads(run_sync(server.whois_lookup("foo.com"))) == {"error": "HTTP 503"}


def test_whois_lookup_without_key_returns_error(monkeypatch):
    def handler(request):
        raise AssertionError("no request expected without a key")

    use_whois_backend(monkeypatch, handler, api_key=None)
    data = json.loads(run_sync(server.whois_lookup("foo.com")))
    assert data == {"error": "API Ninjas key is not configured"}


def test_whois_lookup_empty(provider):
    assert "error" in json.loads(run_sync(server.whois_lookup("")))


# =============================================================================
# check_domains
# =============================================================================

def test_check_domains_expands_and_categorizes(provider):
    data = json.loads(run_sync(server.check_domains(["foo"], tlds=["com", "io", "org", "dev"])))

    assert data["available"] == [
        {"domain": "foo.io", "price": 40.0, "currency": "USD"},
        {"domain": "foo.dev", "price": 12.5, "currency": "USD"},
    ]
    assert data["unavailable"] == ["foo.com"]
    assert data["unknown"] == [{"domain": "foo.org", "triedProviders": ["fake"]}]
    assert data["summary"]["cheapestAvailable"] == {"domain": "foo.dev", "price": 12.5, "currency": "USD"}
    assert data["summary"]["shortestAvailable"]["domain"] == "foo.io"
    assert data["summary"]["topResults"] == ["foo.io", "foo.dev", "foo.com", "foo.org"]


def test_check_domains_full_names_and_duplicates(provider):
    data = json.loads(run_sync(server.check_domains(["foobar.com", "FOOBAR.com", " ", "foo.io"])))

    assert provider.calls == ["foobar.com", "foo.io"]
    assert data["available"] == [{"domain": "foobar.com"}, {"domain": "foo.io", "price": 40.0, "currency": "USD"}]


def test_check_domains_default_tlds(provider):
    run_sync(server.check_domains(["foo"]))
    assert provider.calls == [f"foo.{tld}" for tld in server.DEFAULT_TLDS]


def test_check_domains_only_available(provider):
    data = json.loads(run_sync(server.check_domains(["foo"], tlds=["com", "org", "io"], onlyReportAvailable=True)))
    assert "unavailable" not in data
    assert "unknown" not in data
    assert [d["domain"] for d in data["available"]] == ["foo.io"]


def test_check_domains_schema_takes_names():
    tools = {t.name: t for t in run_sync(server.mcp.list_tools())}
    schema = tools["check_domains"].inputSchema
    assert set(schema["properties"]) == {"names", "tlds", "onlyReportAvailable"}
    assert schema["required"] == ["names"]


def test_check_domains_errors(provider):
    assert json.loads(run_sync(server.check_domains([]))) == {"error": "No domain names provided"}
    assert json.loads(run_sync(server.check_domains(["", "  "]))) == {"error": "No valid domain names after expansion"}


# =============================================================================
# search_domains
# =============================================================================

def test_search_domains_explicit_tld(provider):
    data = json.loads(run_sync(server.search_domains("foo.io")))
    assert data["hasTLD"] is True
    assert [r["domain"] for r in data["results"]] == ["foo.io"]
    assert data["topResults"][0]["price"] == 40.0


def test_search_domains_bare_name(provider):
    data = json.loads(run_sync(server.search_domains("foo", tlds=["com", "dev", "io"])))
    assert [r["domain"] for r in data["results"]] == ["foo.com", "foo.dev", "foo.io"]
    assert [r["domain"] for r in data["topResults"]] == ["foo.io", "foo.dev", "foo.com"]


def test_search_domains_empty(provider):
    assert "error" in json.loads(run_sync(server.search_domains("")))


# =============================================================================
# get_supported_tlds / suggest_domains / get_registration_links
# =============================================================================

def test_get_supported_tlds_without_registrar(provider):
    data = json.loads(run_sync(server.get_supported_tlds()))
    assert data["tlds"][:3] == ["com", "net", "org"]


def test_suggest_domains():
    data = json.loads(server.suggest_domains("Foo.io"))
    assert data["baseName"] == "foo"
    assert data["names"][0] == "getfoo"
    assert "foo.io" not in data["relatedDomains"]
    assert "foo.com" in data["relatedDomains"]


def test_suggest_domains_empty():
    assert "error" in json.loads(server.suggest_domains(" "))


def test_get_registration_links():
    data = json.loads(server.get_registration_links("Foo.com"))
    assert data["domain"] == "foo.com"
    assert data["links"][0] == {
        "name": "Cloudflare",
        "url": "https://www.cloudflare.com/products/registrar/?domain=foo.com",
    }
    assert len(data["links"]) == 5


def test_get_registration_links_empty():
    assert "error" in json.loads(server.get_registration_links(""))


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
