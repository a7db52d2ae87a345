"""
Domain search helpers: input parsing, ranking, suggestions and the
search flow built on top of the availability resolver.
"""

import logging
from dataclasses import dataclass, field
from urllib.parse import quote

from .providers import DomainSearchResult, ProviderError
from .resolver import AvailabilityResolver

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

POPULAR_EXTENSIONS = [
    "com", "net", "org", "io", "co", "dev", "app",
    "tech", "online", "site", "store", "blog", "info",
]

# Used to order results of equal availability. Unlisted TLDs sort last.
TLD_PRIORITY = {
    "com": 1,
    "net": 2,
    "org": 3,
    "io": 4,
    "co": 5,
    "dev": 6,
    "app": 7,
}
UNLISTED_TLD_PRIORITY = 999

# TLDs recommended when an explicitly requested domain is taken
RECOMMENDED_TLDS = list(TLD_PRIORITY)

RELATED_TLDS = ["com", "net", "org", "io", "co", "dev", "app", "tech", "online", "site"]

SUGGESTION_PREFIXES = ["get", "try", "my", "use", "go"]
SUGGESTION_SUFFIXES = ["app", "hq", "io", "hub", "pro", "online", "site"]

# Maximum TLDs checked when searching a bare name
MAX_SEARCH_TLDS = 20

DEFAULT_TOP_LIMIT = 4

# Registrar name -> search/purchase URL template
REGISTRATION_PLATFORMS = {
    "Cloudflare": "https://www.cloudflare.com/products/registrar/?domain={domain}",
    "Spaceship": "https://www.spaceship.com/domains/search?query={domain}",
    "Porkbun": "https://porkbun.com/checkout/search?q={domain}",
    "Namecheap": "https://www.namecheap.com/domains/registration/results/?domain={domain}",
    "Dynadot": "https://www.dynadot.com/domain/search.html?domain={domain}",
}


@dataclass(frozen=True)
class ParsedInput:
    """A raw search string split into base name and TLD."""
    base_name: str
    has_tld: bool
    tld: str | None = None
    full_domain: str | None = None


@dataclass(frozen=True)
class RegistrationLink:
    name: str
    url: str


@dataclass
class SearchOutcome:
    """Everything one search produced."""
    query: str
    parsed: ParsedInput | None
    results: list[DomainSearchResult] = field(default_factory=list)
    top_results: list[DomainSearchResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {
            "query": self.query,
            "results": [r.to_dict() for r in self.results],
            "topResults": [r.to_dict() for r in self.top_results],
        }
        if self.parsed is not None:
            data["baseName"] = self.parsed.base_name
            data["hasTLD"] = self.parsed.has_tld
            if self.parsed.tld:
                data["tld"] = self.parsed.tld
        return data


# =============================================================================
# Parsing and Ranking
# =============================================================================

def parse_domain_input(raw: str) -> ParsedInput:
    """
    Split a search string on its last dot.

    The trailing segment counts as a TLD only if there are at least two
    segments and it is at least two characters long:
        "example.com" -> base "example", tld "com"
        "a.b.io"      -> base "a.b", tld "io"
        "example"     -> base "example", no tld
    """
    trimmed = raw.strip().lower()
    parts = trimmed.split(".")

    if len(parts) >= 2 and len(parts[-1]) >= 2:
        return ParsedInput(
            base_name=".".join(parts[:-1]),
            has_tld=True,
            tld=parts[-1],
            full_domain=trimmed,
        )

    return ParsedInput(base_name=trimmed, has_tld=False)


def rank_top(results: list[DomainSearchResult], limit: int = DEFAULT_TOP_LIMIT) -> list[DomainSearchResult]:
    """
    Pick the most relevant results.

    Available domains come first, then lower TLD priority. sorted() is
    stable, so anything still tied keeps its original order.
    """
    ranked = sorted(results, key=lambda r: (not r.available, TLD_PRIORITY.get(r.tld, UNLISTED_TLD_PRIORITY)))
    return ranked[:max(limit, 0)]


# =============================================================================
# Suggestions
# =============================================================================

def generate_domain_suggestions(base_name: str) -> list[str]:
    """Name variants such as getfoo, foohq, foos, thefoo."""
    suggestions = [f"{prefix}{base_name}" for prefix in SUGGESTION_PREFIXES]
    suggestions.extend(f"{base_name}{suffix}" for suffix in SUGGESTION_SUFFIXES)
    suggestions.append(f"{base_name}s")
    suggestions.append(f"the{base_name}")
    return suggestions


def related_domain_suggestions(base_name: str, exclude_tld: str | None = None) -> list[str]:
    """The same base name on other common TLDs."""
    return [f"{base_name}.{tld}" for tld in RELATED_TLDS if tld != exclude_tld]


def registration_links(domain: str) -> list[RegistrationLink]:
    """Where the domain can be searched for or bought."""
    encoded = quote(domain, safe="")
    return [
        RegistrationLink(name=name, url=template.format(domain=encoded))
        for name, template in REGISTRATION_PLATFORMS.items()
    ]


# =============================================================================
# Search Flow
# =============================================================================

async def fetch_supported_tlds(resolver: AvailabilityResolver) -> list[str]:
    """
    TLDs the registrar supports, or POPULAR_EXTENSIONS when that is unknown.
    """
    registrar = resolver.registrar
    if registrar is None:
        logger.info("No registrar token configured, using popular extensions")
        return list(POPULAR_EXTENSIONS)

    try:
        tlds = await registrar.supported_tlds()
    except ProviderError as e:
        logger.warning("Could not fetch supported TLDs: %s", e.message)
        return list(POPULAR_EXTENSIONS)

    if not tlds:
        return list(POPULAR_EXTENSIONS)
    return tlds


async def search_domains(
    resolver: AvailabilityResolver,
    query: str,
    tlds: list[str] | None = None,
) -> SearchOutcome:
    """
    Search for a name or a specific domain.

    With an explicit TLD the domain itself is checked, and when it is not
    available the same base name is checked on the recommended TLDs too.
    Without a TLD the base name is checked across up to MAX_SEARCH_TLDS
    TLDs (the registrar's list when tlds is not given).
    """
    if not query or not query.strip():
        return SearchOutcome(query=query, parsed=None)

    parsed = parse_domain_input(query)

    if parsed.has_tld and parsed.full_domain:
        main_result = await resolver.resolve(parsed.full_domain)
        results = [main_result]

        if not main_result.available:
            recommended = [
                f"{parsed.base_name}.{tld}" for tld in RECOMMENDED_TLDS if tld != parsed.tld
            ]
            results.extend(await resolver.resolve_many(recommended))
    else:
        if tlds is None:
            tlds = await fetch_supported_tlds(resolver)
        results = await resolver.bulk_resolve(parsed.base_name, tlds[:MAX_SEARCH_TLDS])

    return SearchOutcome(
        query=query,
        parsed=parsed,
        results=results,
        top_results=rank_top(results),
    )
