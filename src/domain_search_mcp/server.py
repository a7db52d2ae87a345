"""
Domain Search MCP Server

An MCP server for domain name search:
- Availability checks with provider fallback (Vercel, API Ninjas, RapidAPI)
- Registration pricing (via Vercel, when a token is configured)
- Name suggestions, supported TLDs and registrar links
- WHOIS lookup (via API Ninjas, when a key is configured)
"""

import json
import logging
import os

from mcp.server.fastmcp import FastMCP

from .config import load_resolver_config
from .providers import ProviderError
from .resolver import AvailabilityResolver
from .search import (
    fetch_supported_tlds,
    generate_domain_suggestions,
    parse_domain_input,
    rank_top,
    registration_links,
    related_domain_suggestions,
    search_domains as run_search,
)

# Suppress httpx request logging by default (request URLs can carry credentials)
# Set DOMAIN_SEARCH_DEBUG=1 to enable verbose HTTP logging
if not os.environ.get("DOMAIN_SEARCH_DEBUG"):
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# Server version
VERSION = "0.2.0"

# Initialize the MCP server
mcp = FastMCP("domain-search")
mcp._mcp_server.version = VERSION

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TLDS = ["com", "net", "org", "io", "co", "dev", "app"]


def make_resolver() -> AvailabilityResolver:
    """Resolver built from stored credentials. Tests replace this."""
    return AvailabilityResolver(load_resolver_config())


# =============================================================================
# MCP Tools
# =============================================================================

@mcp.tool()
def version() -> str:
    """
    Get the version of the Domain Search MCP server.

    Returns:
        Version string including server name and version number.
    """
    return f"Domain Search MCP Server version {VERSION}"


@mcp.tool()
async def check_domain(domain: str) -> str:
    """
    Check availability (and price, when known) of a single domain.

    Args:
        domain: Full domain name, e.g. "example.com"

    Returns:
        JSON with domain, available, and optional price/currency/provider.
        "degraded": true means no provider answered and availability is unknown.
    """
    domain = (domain or "").strip().lower()
    if not domain:
        return json.dumps({"error": "No domain provided"})

    async with make_resolver() as resolver:
        result = await resolver.resolve(domain)

    return json.dumps(result.to_dict())


@mcp.tool()
async def whois_lookup(domain: str) -> str:
    """
    Look up the WHOIS record of a domain (requires an API Ninjas key).

    Args:
        domain: Full domain name, e.g. "example.com"

    Returns:
        JSON with domain and the raw WHOIS record, or {"error": ...} when no
        key is configured or the lookup fails.
    """
    domain = (domain or "").strip().lower()
    if not domain:
        return json.dumps({"error": "No domain provided"})

    try:
        async with make_resolver() as resolver:
            record = await resolver.whois(domain)
    except ProviderError as e:
        logger.warning("WHOIS lookup failed for %s: %s", domain, e.message)
        return json.dumps({"error": e.message})

    return json.dumps({"domain": domain, "whois": record})


@mcp.tool()
async def check_domains(
    names: list[str],
    tlds: list[str] | None = None,
    onlyReportAvailable: bool = False
) -> str:
    """
    Check domain name availability and pricing.

    Args:
        names: List of domain names or base names to check.
               If a name contains a dot, it's treated as a full domain.
               Otherwise, it's combined with each TLD.
        tlds: List of TLDs to check (default: com, net, org, io, co, dev, app)
        onlyReportAvailable: If true, only return available domains in response

    Returns:
        JSON with available domains, unavailable domains (unless onlyReportAvailable),
        unknown domains (no provider answered), and summary.
    """
    if not names:
        return json.dumps({"error": "No domain names provided"})

    if tlds is None:
        tlds = DEFAULT_TLDS

    # Expand names with TLDs, filtering out empty/whitespace names
    domains = []
    for name in names:
        name = name.strip().lower()
        if not name:
            continue
        if "." in name:
            domains.append(name)
        else:
            for tld in tlds:
                domains.append(f"{name}.{tld.lstrip('.')}")

    # Remove duplicates while preserving order
    domains = list(dict.fromkeys(domains))

    if not domains:
        return json.dumps({"error": "No valid domain names after expansion"})

    async with make_resolver() as resolver:
        results = await resolver.resolve_many(domains)

    available_list = []
    unavailable_list = []
    unknown_list = []

    for r in results:
        if r.available:
            entry = {"domain": r.domain}
            if r.price is not None:
                entry["price"] = r.price
            if r.currency is not None:
                entry["currency"] = r.currency
            available_list.append(entry)
        elif r.degraded:
            unknown_list.append({"domain": r.domain, "triedProviders": list(r.tried_providers)})
        else:
            unavailable_list.append(r.domain)

    response = {
        "available": available_list,
    }

    if not onlyReportAvailable:
        response["unavailable"] = unavailable_list
        if unknown_list:
            response["unknown"] = unknown_list

    # Build summary
    summary = {}
    if available_list:
        with_price = [d for d in available_list if "price" in d]
        if with_price:
            summary["cheapestAvailable"] = min(with_price, key=lambda x: x["price"])

        summary["shortestAvailable"] = min(available_list, key=lambda x: len(x["domain"]))

    top = rank_top(results)
    if top:
        summary["topResults"] = [r.domain for r in top]

    if summary:
        response["summary"] = summary

    return json.dumps(response)


@mcp.tool()
async def search_domains(query: str, tlds: list[str] | None = None) -> str:
    """
    Search for a domain the way a person types it.

    "example.com" checks that domain and, if it is taken, recommends the same
    name on popular TLDs. "example" checks the name across up to 20 TLDs.

    Args:
        query: A base name or a full domain
        tlds: TLDs to use for a base name (default: registrar-supported TLDs)

    Returns:
        JSON with all results and the top 4 results.
    """
    if not query or not query.strip():
        return json.dumps({"error": "No search query provided"})

    async with make_resolver() as resolver:
        outcome = await run_search(resolver, query, tlds)

    return json.dumps(outcome.to_dict())


@mcp.tool()
async def get_supported_tlds() -> str:
    """
    Get the TLDs available for search.

    Returns:
        JSON with the registrar's supported TLDs, or popular extensions
        when no registrar token is configured.
    """
    async with make_resolver() as resolver:
        tlds = await fetch_supported_tlds(resolver)

    return json.dumps({"tlds": tlds})


@mcp.tool()
def suggest_domains(name: str) -> str:
    """
    Suggest alternative names and domains for a base name.

    Args:
        name: A base name ("example") or full domain ("example.com")

    Returns:
        JSON with name variants and the same name on related TLDs.
    """
    if not name or not name.strip():
        return json.dumps({"error": "No name provided"})

    parsed = parse_domain_input(name)
    return json.dumps({
        "baseName": parsed.base_name,
        "names": generate_domain_suggestions(parsed.base_name),
        "relatedDomains": related_domain_suggestions(parsed.base_name, parsed.tld),
    })


@mcp.tool()
def get_registration_links(domain: str) -> str:
    """
    Get registrar links where a domain can be searched for or bought.

    Args:
        domain: Full domain name

    Returns:
        JSON list of {name, url}.
    """
    domain = (domain or "").strip().lower()
    if not domain:
        return json.dumps({"error": "No domain provided"})

    return json.dumps({
        "domain": domain,
        "links": [{"name": link.name, "url": link.url} for link in registration_links(domain)],
    })
