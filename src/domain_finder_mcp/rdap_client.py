"""
Async RDAP Client

Queries a domain's registry over RDAP and normalizes the response into a
LookupOutcome. Transport failures are reported as explicit ERROR/TIMEOUT
statuses so callers never mistake an outage for an unregistered domain.
"""

import logging

import httpx

from .models import LookupOutcome, LookupStatus, split_domain
from .registries import DEFAULT_REGISTRY_TABLE, RegistryTable

logger = logging.getLogger(__name__)

RDAP_ACCEPT = "application/rdap+json"


def _registration_date(data: dict) -> str | None:
    """Pull the 'registration' event date out of an RDAP domain object."""
    events = data.get("events")
    if not isinstance(events, list):
        return None
    for event in events:
        if isinstance(event, dict) and event.get("eventAction") == "registration":
            date = event.get("eventDate")
            return str(date) if date else None
    return None


def parse_rdap_payload(data: object) -> LookupOutcome:
    """
    Classify a 2xx RDAP response body.

    Some registries answer 200 with an error object instead of a 404, so
    the payload is checked for an RDAP error code before it is trusted.
    """
    if not isinstance(data, dict):
        return LookupOutcome(LookupStatus.ERROR, "error")

    title = str(data.get("title") or "").lower()
    if data.get("errorCode") == 404 or "not found" in title:
        return LookupOutcome(LookupStatus.NOT_FOUND, "not_found")

    if data.get("objectClassName") == "domain" or data.get("handle"):
        return LookupOutcome(
            LookupStatus.FOUND,
            "registered",
            registration_date=_registration_date(data),
        )

    return LookupOutcome(LookupStatus.UNKNOWN, "unknown")


class RdapClient:
    """
    Registry lookup over RDAP using a shared httpx.AsyncClient.

    Usage:
        async with httpx.AsyncClient() as http:
            outcome = await RdapClient(http).lookup("example.com")
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        registries: RegistryTable = DEFAULT_REGISTRY_TABLE,
        timeout: float = 5.0,
    ) -> None:
        self._http = http
        self._registries = registries
        self._timeout = timeout

    async def lookup(self, domain: str) -> LookupOutcome:
        """Query the domain's registry. Never raises for network problems."""
        _, tld = split_domain(domain)

        rdap_server = self._registries.endpoint_for(tld) if tld else None
        if not rdap_server:
            return LookupOutcome(LookupStatus.NO_ENDPOINT, "no_endpoint")

        url = f"{rdap_server}/domain/{domain.lower()}"

        try:
            response = await self._http.get(
                url,
                headers={"Accept": RDAP_ACCEPT},
                timeout=self._timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException:
            logger.debug("RDAP timeout for %s", domain)
            return LookupOutcome(LookupStatus.TIMEOUT, "timeout")
        except httpx.HTTPError as e:
            logger.debug("RDAP transport error for %s: %s", domain, e)
            return LookupOutcome(LookupStatus.ERROR, "error")

        if response.status_code == 404:
            return LookupOutcome(LookupStatus.NOT_FOUND, "not_found")

        if not response.is_success:
            logger.debug("RDAP status %d for %s", response.status_code, domain)
            return LookupOutcome(LookupStatus.ERROR, "error")

        try:
            data = response.json()
        except ValueError:
            logger.debug("RDAP returned malformed JSON for %s", domain)
            return LookupOutcome(LookupStatus.ERROR, "error")

        return parse_rdap_payload(data)
