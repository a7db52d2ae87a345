#!/usr/bin/env python3
"""
CLI tool to check domain name availability with provider fallback.

Usage:
    python check_domains.py example.com example.net
    python check_domains.py coolstartup --tlds com,io,dev,app
    python check_domains.py coolstartup --top 4

Environment:
    VERCEL_TOKEN     Vercel API token (optional, enables pricing)
    VERCEL_TEAM_ID   Vercel team ID (optional)
    API_NINJAS_KEY   API Ninjas key (optional)
    RAPIDAPI_KEY     RapidAPI Domains key (optional)
"""

import argparse
import asyncio
import json
import logging
import sys

from domain_search_mcp.config import load_resolver_config
from domain_search_mcp.providers import DomainSearchResult
from domain_search_mcp.resolver import AvailabilityResolver
from domain_search_mcp.search import rank_top

DEFAULT_TLDS = ["com", "net", "org", "io", "co", "dev", "app"]


def expand_tlds(name: str, tlds: list[str]) -> list[str]:
    """Expand a base name with multiple TLDs."""
    if "." in name:
        return [name]  # Already a full domain
    return [f"{name}.{tld}" for tld in tlds]


async def check_domains(domains: list[str], timeout: float = 10.0) -> list[DomainSearchResult]:
    """Check domains concurrently using configured providers."""
    async with AvailabilityResolver(load_resolver_config(timeout=timeout)) as resolver:
        return await resolver.resolve_many(domains)


def format_result(result: DomainSearchResult) -> str:
    if result.degraded:
        tried = ", ".join(result.tried_providers) or "none configured"
        return f"[?] {result.domain}: UNKNOWN (providers tried: {tried})"
    if result.available:
        price_str = ""
        if result.price is not None:
            currency = f" {result.currency}" if result.currency else ""
            price_str = f" ({result.price:.2f}{currency})"
        return f"[+] {result.domain}: AVAILABLE{price_str}"
    return f"[-] {result.domain}: TAKEN"


def main():
    parser = argparse.ArgumentParser(
        description="Check domain name availability (Vercel, API Ninjas, RapidAPI)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s example.com example.net
    %(prog)s coolstartup --tlds com,io,dev
    %(prog)s myapp --top 4 --json
        """
    )
    parser.add_argument(
        "names",
        nargs="+",
        help="Domain names or base names to check"
    )
    parser.add_argument(
        "--tlds",
        type=str,
        default=None,
        help=f"Comma-separated list of TLDs to check (default: {','.join(DEFAULT_TLDS)})"
    )
    parser.add_argument(
        "--top",
        type=int,
        default=None,
        metavar="N",
        help="Only show the N best results"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Per-request timeout in seconds (default: 10)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log provider attempts to stderr"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if not args.verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    tlds = [t.strip().lstrip(".") for t in args.tlds.split(",") if t.strip()] if args.tlds else DEFAULT_TLDS

    domains = []
    for name in args.names:
        domains.extend(expand_tlds(name.strip().lower(), tlds))

    # Remove duplicates while preserving order
    domains = list(dict.fromkeys(d for d in domains if d))

    results = asyncio.run(check_domains(domains, timeout=args.timeout))

    if args.top is not None:
        results = rank_top(results, limit=args.top)

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        for result in results:
            print(format_result(result))


if __name__ == "__main__":
    main()
