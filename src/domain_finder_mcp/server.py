"""
Domain Finder MCP Server

An MCP server for finding available, brandable domain names:
- Availability checks through a registry -> DNS -> heuristic cascade
- Candidate generation from a seed keyword with prefixes/suffixes
- WHOIS details for taken domains (needs a WhoisXML API key)
"""

import json
import logging
import os

from mcp.server.fastmcp import FastMCP

from . import __version__
from .batch import normalize_tlds
from .candidates import generate_candidates
from .config import DEFAULT_MAX_TLDS_PER_NAME, load_config
from .errors import ConfigError
from .models import ResolutionResult, SearchConstraints, WhoisData
from .resolver import AvailabilityResolver

# Suppress httpx request logging by default (shows API keys in URLs)
# Set DOMAIN_FINDER_DEBUG=1 to enable verbose HTTP logging
if not os.environ.get("DOMAIN_FINDER_DEBUG"):
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

VERSION = __version__

# Initialize the MCP server
mcp = FastMCP("domain-finder")
mcp._mcp_server.version = VERSION

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TLDS = ["com", "io", "ai", "co", "app", "dev", "net", "org"]


# =============================================================================
# Helpers
# =============================================================================

async def _build_resolver() -> AvailabilityResolver:
    """Create a resolver from the user's configuration."""
    return await AvailabilityResolver.create(load_config())


def _expand_names(names: list[str], tlds: list[str]) -> list[str]:
    """Names containing a dot are full domains; others are crossed with the TLDs."""
    domains = []
    for name in names:
        name = name.strip().lower()
        if not name:
            continue
        if "." in name:
            domains.append(name)
        else:
            for tld in tlds:
                domains.append(f"{name}.{tld}")

    # Remove duplicates while preserving order
    return list(dict.fromkeys(domains))


def _build_response(
    results: list[ResolutionResult],
    only_available: bool,
    whois: dict[str, WhoisData] | None = None,
) -> dict:
    """Group verdicts for display. Taken entries carry WHOIS details when known."""
    whois = whois or {}
    available_list = [r.to_dict() for r in results if r.available]
    taken_list = []
    for r in results:
        if r.available:
            continue
        entry = r.to_dict()
        if r.domain in whois:
            entry["whois"] = whois[r.domain].to_dict()
        taken_list.append(entry)
    verify_list = [r.domain for r in results if r.needs_verification]

    response: dict = {"available": available_list}

    if not only_available:
        response["taken"] = taken_list
    if verify_list:
        response["needsVerification"] = verify_list

    summary: dict = {"checked": len(results), "availableCount": len(available_list)}
    if available_list:
        high = [d for d in available_list if d["confidence"] == "high"]
        summary["shortestAvailable"] = min(available_list, key=lambda x: len(x["domain"]))["domain"]
        if high:
            summary["confirmedAvailable"] = [d["domain"] for d in high]
    response["summary"] = summary

    return response


# =============================================================================
# MCP Tools
# =============================================================================

@mcp.tool()
def version() -> str:
    """
    Get the version of the Domain Finder MCP server.

    Returns:
        Version string including server name and version number.
    """
    return f"Domain Finder MCP Server version {VERSION}"


@mcp.tool()
async def check_domains(
    names: list[str],
    tlds: list[str] | None = None,
    onlyReportAvailable: bool = False
) -> str:
    """
    Check domain name availability.

    Args:
        names: List of domain names or base names to check.
               If a name contains a dot, it's treated as a full domain.
               Otherwise, it's combined with each TLD.
        tlds: List of TLDs to check (default: com, io, ai, co, app, dev, net, org).
              At most 10 are used.
        onlyReportAvailable: If true, only return available domains in response

    Returns:
        JSON with available domains, taken domains (unless onlyReportAvailable;
        with a "whois" block when a WhoisXML key is configured),
        domains that need manual verification, and a summary. Each entry has
        availability, confidence (high/medium/low) and checkMethod
        (registry/dns/heuristic/unknown).
    """
    if not names:
        return json.dumps({"error": "No domain names provided"})

    usable_tlds = normalize_tlds(tlds if tlds is not None else DEFAULT_TLDS, DEFAULT_MAX_TLDS_PER_NAME)
    if not usable_tlds:
        return json.dumps({"error": "No valid TLDs provided"})

    domains = _expand_names(names, usable_tlds)
    if not domains:
        return json.dumps({"error": "No valid domain names after expansion"})

    try:
        resolver = await _build_resolver()
    except ConfigError as e:
        return json.dumps({"error": f"Invalid configuration: {e}"})

    async with resolver:
        results = await resolver.resolve_domains(domains)
        whois = {} if onlyReportAvailable else await resolver.whois_for_taken(results)

    return json.dumps(_build_response(results, onlyReportAvailable, whois))


@mcp.tool()
async def suggest_domains(
    seed: str,
    prefixes: list[str] | None = None,
    suffixes: list[str] | None = None,
    tlds: list[str] | None = None,
    minLength: int = 3,
    maxLength: int = 15,
    allowNumerics: bool = False,
    allowHyphens: bool = False,
    onlyReportAvailable: bool = False
) -> str:
    """
    Generate name candidates from a seed keyword and check their availability.

    Args:
        seed: Keyword to build names around (e.g. "rocket")
        prefixes: Prefixes to try, e.g. ["get", "try"]
        suffixes: Suffixes to try, e.g. ["ly", "hq"]
        tlds: TLDs to check (default: com, io, ai, co, app, dev, net, org). At most 10.
        minLength: Minimum length of the name (without TLD)
        maxLength: Maximum length of the name (without TLD)
        allowNumerics: Allow digits in names
        allowHyphens: Allow hyphens in names
        onlyReportAvailable: If true, only return available domains in response

    Returns:
        JSON with the generated candidates and the same availability report
        as check_domains.
    """
    if not seed or not seed.strip():
        return json.dumps({"error": "No seed keyword provided"})

    usable_tlds = normalize_tlds(tlds if tlds is not None else DEFAULT_TLDS, DEFAULT_MAX_TLDS_PER_NAME)
    if not usable_tlds:
        return json.dumps({"error": "No valid TLDs provided"})

    constraints = SearchConstraints(
        min_length=minLength,
        max_length=maxLength,
        allow_numerics=allowNumerics,
        allow_hyphens=allowHyphens,
        prefixes=tuple(prefixes or ()),
        suffixes=tuple(suffixes or ()),
    )

    try:
        candidates = generate_candidates(seed, constraints)
    except ConfigError as e:
        return json.dumps({"error": str(e)})

    if not candidates:
        return json.dumps({"error": "No candidates satisfy the constraints"})

    try:
        resolver = await _build_resolver()
    except ConfigError as e:
        return json.dumps({"error": f"Invalid configuration: {e}"})

    async with resolver:
        results = await resolver.resolve_batch(candidates, usable_tlds)
        whois = {} if onlyReportAvailable else await resolver.whois_for_taken(results)

    response = {"candidates": candidates}
    response.update(_build_response(results, onlyReportAvailable, whois))
    return json.dumps(response)


@mcp.tool()
async def whois_lookup(domain: str) -> str:
    """
    Get WHOIS registration details for a taken domain.

    Requires a WhoisXML API key (WHOISXML_API_KEY or `domain-finder-mcp --setup`).

    Args:
        domain: Full domain name, e.g. "example.com"

    Returns:
        JSON with registrar, createdDate, expiryDate, updatedDate, status
        and nameservers.
    """
    domain = (domain or "").strip().lower()
    if "." not in domain:
        return json.dumps({"error": "A full domain name is required"})

    try:
        resolver = await _build_resolver()
    except ConfigError as e:
        return json.dumps({"error": f"Invalid configuration: {e}"})

    if not resolver.whois_configured:
        await resolver.aclose()
        return json.dumps({"error": "WhoisXML API key not configured"})

    async with resolver:
        data = await resolver.whois(domain)

    if data is None:
        return json.dumps({"domain": domain, "error": "No WHOIS data available"})

    response = {"domain": domain}
    response.update(data.to_dict())
    return json.dumps(response)
