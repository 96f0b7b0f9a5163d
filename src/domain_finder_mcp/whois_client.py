"""
WHOIS-over-HTTP lookup via WhoisXML.

Fetches registration details (registrar, dates, status, nameservers) for
domains that are already known to be taken. Not part of the availability
cascade.
"""

import logging

import httpx

from .models import WhoisData

logger = logging.getLogger(__name__)

WHOISXML_URL = "https://www.whoisxmlapi.com/whoisserver/WhoisService"


def _as_list(value: object) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v]
    if isinstance(value, str) and value.strip():
        return value.split()
    return []


def parse_whois_record(data: object) -> WhoisData | None:
    """Convert a WhoisXML JSON payload into WhoisData."""
    if not isinstance(data, dict):
        return None
    record = data.get("WhoisRecord")
    if not isinstance(record, dict):
        return None

    nameservers = record.get("nameServers")
    hostnames = nameservers.get("hostNames") if isinstance(nameservers, dict) else None

    return WhoisData(
        registrar=record.get("registrarName") or "Unknown",
        created_date=record.get("createdDate"),
        expiry_date=record.get("expiresDate"),
        updated_date=record.get("updatedDate"),
        status=_as_list(record.get("status")),
        nameservers=_as_list(hostnames),
    )


class WhoisClient:
    """WhoisXML client; returns None when no key is configured."""

    def __init__(self, http: httpx.AsyncClient, api_key: str | None, timeout: float = 8.0) -> None:
        self._http = http
        self._api_key = api_key
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def lookup(self, domain: str) -> WhoisData | None:
        if not self._api_key:
            logger.debug("WhoisXML API key not configured")
            return None

        try:
            response = await self._http.get(
                WHOISXML_URL,
                params={
                    "apiKey": self._api_key,
                    "domainName": domain.lower(),
                    "outputFormat": "JSON",
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.debug("WhoisXML request for %s failed: %s", domain, type(e).__name__)
            return None
        except ValueError:
            logger.debug("WhoisXML returned malformed JSON for %s", domain)
            return None

        return parse_whois_record(data)
