"""
Keyed registry status lookup via the Domainr API (RapidAPI).

Used in place of RDAP when a registry API key is configured. Returns the
same LookupOutcome contract as RdapClient.
"""

import logging

import httpx

from .models import LookupOutcome, LookupStatus

logger = logging.getLogger(__name__)

DOMAINR_HOST = "domainr.p.rapidapi.com"
DOMAINR_STATUS_URL = f"https://{DOMAINR_HOST}/v2/status"

# "active" means someone holds the name; "undelegated" only means no DNS delegation
HELD_TOKEN = "active"
FREE_TOKEN = "inactive"
NO_DELEGATION_TOKEN = "undelegated"


def parse_domainr_status(data: object) -> LookupOutcome:
    """
    Classify a Domainr status payload.

    Domainr reports a space-separated token list per domain, e.g.
    "undelegated inactive" or "active registrar". Only "inactive" without
    "active" means nobody holds the name; a bare "undelegated" is left to
    the DNS layer.
    """
    if not isinstance(data, dict):
        return LookupOutcome(LookupStatus.ERROR, "error")

    entries = data.get("status")
    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        return LookupOutcome(LookupStatus.ERROR, "error")

    tokens = set(str(entries[0].get("status") or "").split())
    if not tokens or tokens == {"unknown"}:
        return LookupOutcome(LookupStatus.UNKNOWN, "unknown")
    if FREE_TOKEN in tokens and HELD_TOKEN not in tokens:
        return LookupOutcome(LookupStatus.NOT_FOUND, "not_found")
    if tokens == {NO_DELEGATION_TOKEN}:
        return LookupOutcome(LookupStatus.UNKNOWN, "undelegated")
    return LookupOutcome(LookupStatus.FOUND, " ".join(sorted(tokens)))


class DomainrClient:
    """Registry status through Domainr; needs a RapidAPI key."""

    def __init__(self, http: httpx.AsyncClient, api_key: str, timeout: float = 5.0) -> None:
        self._http = http
        self._api_key = api_key
        self._timeout = timeout

    async def lookup(self, domain: str) -> LookupOutcome:
        try:
            response = await self._http.get(
                DOMAINR_STATUS_URL,
                params={"domain": domain.lower()},
                headers={
                    "X-RapidAPI-Key": self._api_key,
                    "X-RapidAPI-Host": DOMAINR_HOST,
                },
                timeout=self._timeout,
            )
        except httpx.TimeoutException:
            logger.debug("Domainr timeout for %s", domain)
            return LookupOutcome(LookupStatus.TIMEOUT, "timeout")
        except httpx.HTTPError as e:
            logger.debug("Domainr transport error for %s: %s", domain, e)
            return LookupOutcome(LookupStatus.ERROR, "error")

        if not response.is_success:
            logger.debug("Domainr status %d for %s", response.status_code, domain)
            return LookupOutcome(LookupStatus.ERROR, "error")

        try:
            data = response.json()
        except ValueError:
            return LookupOutcome(LookupStatus.ERROR, "error")

        return parse_domainr_status(data)
