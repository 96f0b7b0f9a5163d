"""
Registry Endpoint Table

Maps TLDs to their authoritative RDAP servers. A static table covers the
TLDs the finder cares about; it can optionally be extended from the IANA
bootstrap file, which maps every RDAP-enabled TLD to its registry.

The table is immutable once built and shared read-only by all lookups.
"""

import json
import logging
from types import MappingProxyType
from typing import Mapping

import httpx

logger = logging.getLogger(__name__)

# IANA bootstrap URL
IANA_BOOTSTRAP_URL = "https://data.iana.org/rdap/dns.json"

STATIC_ENDPOINTS = {
    # Generic TLDs
    "com": "https://rdap.verisign.com/com/v1",
    "net": "https://rdap.verisign.com/net/v1",
    "org": "https://rdap.publicinterestregistry.org",
    "info": "https://rdap.afilias.info",
    "biz": "https://rdap.nic.biz",
    # New generic TLDs
    "io": "https://rdap.nic.io",
    "ai": "https://rdap.nic.ai",
    "app": "https://rdap.nic.google",
    "dev": "https://rdap.nic.google",
    "co": "https://rdap.nic.co",
    "me": "https://rdap.nic.me",
    "xyz": "https://rdap.centralnic.com/xyz",
    "online": "https://rdap.centralnic.com/online",
    "store": "https://rdap.centralnic.com/store",
    "tech": "https://rdap.centralnic.com/tech",
    "site": "https://rdap.centralnic.com/site",
    "cloud": "https://rdap.centralnic.com/cloud",
    # Country code TLDs
    "us": "https://rdap.nic.us",
    "uk": "https://rdap.nominet.uk",
    "ca": "https://rdap.ca",
    "de": "https://rdap.denic.de",
    "au": "https://rdap.identitydigital.services/rdap",
}


class RegistryTable:
    """Read-only TLD -> RDAP base URL mapping."""

    def __init__(self, endpoints: Mapping[str, str] | None = None) -> None:
        source = STATIC_ENDPOINTS if endpoints is None else endpoints
        self._endpoints = MappingProxyType(
            {tld.lower().lstrip("."): url.rstrip("/") for tld, url in source.items()}
        )

    def endpoint_for(self, tld: str) -> str | None:
        """
        Get the RDAP server URL for a TLD (without leading dot), e.g. "com".

        Returns None if the TLD has no known registry.
        """
        return self._endpoints.get(tld.lower().lstrip("."))

    def supports(self, tld: str) -> bool:
        return self.endpoint_for(tld) is not None

    @property
    def tlds(self) -> list[str]:
        """All supported TLDs, sorted alphabetically."""
        return sorted(self._endpoints)

    def merged_with(self, extra: Mapping[str, str]) -> "RegistryTable":
        """Return a new table with extra entries; existing entries win."""
        combined = dict(extra)
        combined.update(self._endpoints)
        return RegistryTable(combined)

    def __len__(self) -> int:
        return len(self._endpoints)


DEFAULT_REGISTRY_TABLE = RegistryTable()


def _is_str_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def parse_bootstrap_services(data: object) -> dict[str, str]:
    """
    Parse IANA bootstrap format into TLD -> server URL mapping.

    Bootstrap format:
    {
        "services": [
            [["com", "net"], ["https://rdap.verisign.com/com/v1/"]],
            [["org"], ["https://rdap.publicinterestregistry.org/rdap/"]],
            ...
        ]
    }

    Only the first URL of each service entry is kept. Entries that are not
    a [tlds, urls] pair of string lists, or whose first URL is not http(s),
    are skipped.
    """
    services = {}
    entries = data.get("services") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        return services

    for entry in entries:
        if not isinstance(entry, list) or len(entry) != 2:
            continue
        tlds, urls = entry
        if not _is_str_list(tlds) or not _is_str_list(urls) or not urls:
            continue
        url = urls[0]
        if not url.startswith(("http://", "https://")):
            continue
        for tld in tlds:
            tld = tld.strip().lower().lstrip(".")
            if tld:
                services[tld] = url
    return services


async def load_bootstrap_table(
    http: httpx.AsyncClient,
    base: RegistryTable = DEFAULT_REGISTRY_TABLE,
    url: str = IANA_BOOTSTRAP_URL,
    timeout: float = 30.0,
) -> RegistryTable:
    """
    Extend a registry table with the IANA bootstrap file.

    Network errors or an invalid payload leave the base table unchanged.
    """
    try:
        response = await http.get(url, headers={"Accept": "application/json"}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as e:
        logger.warning("IANA bootstrap fetch failed, using static registry table: %s", e)
        return base
    except (json.JSONDecodeError, ValueError):
        logger.warning("IANA bootstrap returned invalid JSON, using static registry table")
        return base

    services = parse_bootstrap_services(data)
    if not services:
        logger.warning("IANA bootstrap had no usable services, using static registry table")
        return base

    table = base.merged_with(services)
    logger.debug("Registry table extended to %d TLDs from IANA bootstrap", len(table))
    return table
