"""
Availability Resolver

Runs an ordered chain of strategies for one domain and returns the first
verdict produced. The default chain follows signal reliability:

    registry (RDAP or Domainr)  ->  DNS probe  ->  heuristic

Every strategy exposes `attempt(domain) -> ResolutionResult | None`; None
means "inconclusive, ask the next one". If the whole chain is
inconclusive the resolver answers "taken" with low confidence.
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Protocol

import httpx

from .batch import BatchQueryCoordinator, windows
from .config import ResolverConfig
from .dns_probe import DnsProbe
from .domainr_client import DomainrClient
from .heuristics import estimate
from .models import (
    Confidence,
    LookupOutcome,
    LookupStatus,
    Method,
    ResolutionResult,
    WhoisData,
)
from .rdap_client import RdapClient
from .registries import DEFAULT_REGISTRY_TABLE, RegistryTable, load_bootstrap_table
from .whois_client import WhoisClient

logger = logging.getLogger(__name__)

USER_AGENT = "DomainFinderMCP/0.1"


class RegistryLookup(Protocol):
    """Anything that can answer a registry lookup."""

    async def lookup(self, domain: str) -> LookupOutcome:
        ...


class Strategy(Protocol):
    """One layer of the resolution cascade."""

    method: Method

    async def attempt(self, domain: str) -> ResolutionResult | None:
        ...


class RegistryStrategy:
    """Ground truth from the registry. Conclusive only on found/not-found."""

    method = Method.REGISTRY

    def __init__(self, client: RegistryLookup) -> None:
        self._client = client

    async def attempt(self, domain: str) -> ResolutionResult | None:
        try:
            outcome = await self._client.lookup(domain)
        except Exception as e:
            logger.warning("Registry lookup for %s raised %r, falling through", domain, e)
            return None

        if outcome.status == LookupStatus.NOT_FOUND:
            return ResolutionResult(
                domain=domain,
                available=True,
                confidence=Confidence.HIGH,
                method=self.method,
                details="Domain not found in registry database",
            )

        if outcome.status == LookupStatus.FOUND:
            details = "Registered"
            if outcome.registration_date:
                details += f" on {outcome.registration_date}"
            return ResolutionResult(
                domain=domain,
                available=False,
                confidence=Confidence.HIGH,
                method=self.method,
                details=details,
                registration_date=outcome.registration_date,
            )

        logger.debug("Registry inconclusive for %s: %s", domain, outcome.detail)
        return None


class DnsStrategy:
    """Published records prove registration; NXDOMAIN everywhere suggests availability."""

    method = Method.DNS

    def __init__(self, probe: DnsProbe) -> None:
        self._probe = probe

    async def attempt(self, domain: str) -> ResolutionResult | None:
        try:
            result = await self._probe.probe(domain)
        except Exception as e:
            logger.warning("DNS probe for %s raised %r, falling through", domain, e)
            return None

        if result.has_records:
            return ResolutionResult(
                domain=domain,
                available=False,
                confidence=Confidence.HIGH,
                method=self.method,
                details=f"Domain has active DNS records ({result.status.value})",
            )

        if result.all_absent:
            # Registered names can exist without DNS, so NXDOMAIN is not proof.
            return ResolutionResult(
                domain=domain,
                available=True,
                confidence=Confidence.MEDIUM,
                method=self.method,
                details="No DNS records found (NXDOMAIN)",
            )

        return None


class HeuristicStrategy:
    """Always answers. Errors here are bugs, so they are not caught."""

    method = Method.HEURISTIC

    async def attempt(self, domain: str) -> ResolutionResult | None:
        guess = estimate(domain)
        return ResolutionResult(
            domain=domain,
            available=guess.available,
            confidence=guess.confidence,
            method=self.method,
            details=guess.details,
        )


def _unresolved(domain: str) -> ResolutionResult:
    return ResolutionResult(
        domain=domain,
        available=False,
        confidence=Confidence.LOW,
        method=Method.UNKNOWN,
        details="Unable to verify availability - verify manually",
    )


class AvailabilityResolver:
    """
    Multi-layer domain availability resolver.

    Usage:
        async with AvailabilityResolver(ResolverConfig()) as resolver:
            result = await resolver.resolve("example.com")
            results = await resolver.resolve_batch(["example"], ["com", "io"])

    Pass `http_client` to share a connection pool (or inject a mock
    transport); a client passed in is not closed by the resolver.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        registries: RegistryTable = DEFAULT_REGISTRY_TABLE,
        strategies: list[Strategy] | None = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
        )
        self._closed = False

        if strategies is None:
            strategies = self._default_strategies(registries)
        self.strategies = list(strategies)

        self._whois = WhoisClient(
            self._http, self.config.whois_api_key, timeout=self.config.whois_timeout
        )

    @classmethod
    async def create(
        cls,
        config: ResolverConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> "AvailabilityResolver":
        """Build a resolver, extending the registry table from IANA if configured."""
        config = config or ResolverConfig()
        resolver = cls(config, http_client=http_client)
        if config.use_iana_bootstrap:
            try:
                table = await load_bootstrap_table(resolver._http)
            except BaseException:
                await resolver.aclose()
                raise
            resolver.strategies = resolver._default_strategies(table)
        return resolver

    def _default_strategies(self, registries: RegistryTable) -> list[Strategy]:
        config = self.config
        if config.registry_api_key:
            registry: RegistryLookup = DomainrClient(
                self._http, config.registry_api_key, timeout=config.registry_timeout
            )
        else:
            registry = RdapClient(self._http, registries, timeout=config.registry_timeout)

        probe = DnsProbe(self._http, config.dns_resolver_url, timeout=config.dns_timeout)
        return [RegistryStrategy(registry), DnsStrategy(probe), HeuristicStrategy()]

    async def __aenter__(self) -> "AvailabilityResolver":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and not self._closed:
            await self._http.aclose()
        self._closed = True

    async def resolve(self, domain: str) -> ResolutionResult:
        """Return exactly one verdict for a fully-qualified domain."""
        if self._closed:
            raise RuntimeError("Resolver is closed.")

        domain = domain.strip().lower().rstrip(".")
        start = time.perf_counter()

        result = None
        for strategy in self.strategies:
            result = await strategy.attempt(domain)
            if result is not None:
                break
        if result is None:
            result = _unresolved(domain)

        result = replace(result, elapsed_ms=(time.perf_counter() - start) * 1000)
        logger.debug(
            "%s: %s (%s confidence via %s) - %s",
            domain,
            "Available" if result.available else "Taken",
            result.confidence.value,
            result.method.value,
            result.details,
        )
        return result

    async def resolve_batch(self, names: list[str], tlds: list[str]) -> list[ResolutionResult]:
        """Resolve every (name, TLD) pair in paced concurrency windows."""
        return await self._coordinator().run(names, tlds)

    async def resolve_domains(self, domains: list[str]) -> list[ResolutionResult]:
        """Resolve fully-qualified domains in paced concurrency windows."""
        return await self._coordinator().run_domains(domains)

    def _coordinator(self) -> BatchQueryCoordinator:
        return BatchQueryCoordinator(
            self,
            concurrency=self.config.concurrency,
            batch_delay_ms=self.config.batch_delay_ms,
            max_tlds_per_name=self.config.max_tlds_per_name,
        )

    async def whois(self, domain: str) -> WhoisData | None:
        """Registration details for a taken domain, if a WHOIS key is configured."""
        return await self._whois.lookup(domain)

    @property
    def whois_configured(self) -> bool:
        return self._whois.configured

    async def whois_for_taken(self, results: list[ResolutionResult]) -> dict[str, WhoisData]:
        """
        WHOIS details for every taken result, keyed by domain.

        Empty without a WHOIS key. Lookups run `concurrency` at a time;
        domains WhoisXML has nothing for are left out.
        """
        if not self._whois.configured:
            return {}

        taken = list(dict.fromkeys(r.domain for r in results if not r.available))
        details: dict[str, WhoisData] = {}
        for window in windows(taken, self.config.concurrency):
            found = await asyncio.gather(*(self._whois.lookup(d) for d in window))
            details.update((d, data) for d, data in zip(window, found) if data is not None)
        return details
