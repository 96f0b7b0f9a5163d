"""
Batch Query Coordinator

Fans a resolver out over a name x TLD cross product. Queries run in
fixed-size windows: everything inside a window runs concurrently, windows
run one after another with a fixed pause in between so third-party
registries and resolvers are not hammered.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from .config import DEFAULT_BATCH_DELAY_MS, DEFAULT_CONCURRENCY, DEFAULT_MAX_TLDS_PER_NAME
from .models import ResolutionResult

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    async def resolve(self, domain: str) -> ResolutionResult:
        ...


def normalize_tlds(tlds: list[str], limit: int = DEFAULT_MAX_TLDS_PER_NAME) -> list[str]:
    """Lowercase, strip leading dots, drop blanks and duplicates, cap the count."""
    cleaned = (t.strip().lower().lstrip(".") for t in tlds)
    return list(dict.fromkeys(t for t in cleaned if t))[:limit]


def expand_domains(
    names: list[str],
    tlds: list[str],
    max_tlds_per_name: int = DEFAULT_MAX_TLDS_PER_NAME,
) -> list[str]:
    """Build the name x TLD cross product, in submission order, without duplicates."""
    cleaned_names = (n.strip().lower().strip(".") for n in names)
    unique_names = list(dict.fromkeys(n for n in cleaned_names if n))
    usable_tlds = normalize_tlds(tlds, max_tlds_per_name)
    return [f"{name}.{tld}" for name in unique_names for tld in usable_tlds]


def windows(items: list[str], size: int) -> list[list[str]]:
    """Split items into consecutive chunks of at most `size`."""
    return [items[i:i + size] for i in range(0, len(items), size)]


class BatchQueryCoordinator:
    """Runs a resolver over many domains with windowed concurrency and pacing."""

    def __init__(
        self,
        resolver: Resolver,
        concurrency: int = DEFAULT_CONCURRENCY,
        batch_delay_ms: int = DEFAULT_BATCH_DELAY_MS,
        max_tlds_per_name: int = DEFAULT_MAX_TLDS_PER_NAME,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._resolver = resolver
        self._concurrency = concurrency
        self._delay = batch_delay_ms / 1000
        self._max_tlds_per_name = max_tlds_per_name
        self._sleep = sleep

    async def run(self, names: list[str], tlds: list[str]) -> list[ResolutionResult]:
        """Resolve every (name, TLD) pair. One result per pair that did not crash."""
        domains = expand_domains(names, tlds, self._max_tlds_per_name)
        return await self.run_domains(domains)

    async def run_domains(self, domains: list[str]) -> list[ResolutionResult]:
        """Resolve fully-qualified domains window by window."""
        domains = list(dict.fromkeys(d.strip().lower() for d in domains if d.strip()))
        if not domains:
            return []

        chunks = windows(domains, self._concurrency)
        results: list[ResolutionResult] = []

        for index, chunk in enumerate(chunks):
            settled = await asyncio.gather(
                *(self._resolver.resolve(domain) for domain in chunk),
                return_exceptions=True,
            )

            for domain, outcome in zip(chunk, settled):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    logger.error("Error checking %s", domain, exc_info=outcome)
                    continue
                results.append(outcome)

            if index < len(chunks) - 1 and self._delay > 0:
                await self._sleep(self._delay)

        logger.info("Checked %d domains, %d results", len(domains), len(results))
        return results
