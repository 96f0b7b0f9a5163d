"""
Name-resolution probe over DNS-over-HTTPS (JSON API).

Queries NS, A, AAAA, MX and SOA in parallel against a public resolver and
reports whether the name publishes any records. Each record-type query
settles independently; one failure never aborts the others.
"""

import asyncio
import logging

import httpx

from .models import DnsProbeResult, DnsStatus, RecordAnswer

logger = logging.getLogger(__name__)

RECORD_TYPES = ("NS", "A", "AAAA", "MX", "SOA")

RCODE_NOERROR = 0
RCODE_NXDOMAIN = 3


def summarize(answers: list[RecordAnswer]) -> DnsProbeResult:
    """Fold per-record-type outcomes into a single probe result."""
    answered = [a for a in answers if a.answers > 0]
    has_records = bool(answered)
    all_absent = bool(answers) and all(a.status == RCODE_NXDOMAIN for a in answers)

    if has_records:
        if all(a.rrtype == "SOA" for a in answered):
            status = DnsStatus.REGISTERED_UNCONFIGURED
        else:
            status = DnsStatus.CONFIGURED
    elif all_absent:
        status = DnsStatus.NXDOMAIN
    elif answers and all(a.error for a in answers):
        status = DnsStatus.ERROR
    else:
        status = DnsStatus.UNKNOWN

    return DnsProbeResult(
        has_records=has_records,
        all_absent=all_absent,
        status=status,
        answers=tuple(answers),
    )


class DnsProbe:
    """Parallel multi-record DNS probe using a shared httpx.AsyncClient."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        resolver_url: str = "https://dns.google/resolve",
        timeout: float = 5.0,
        record_types: tuple[str, ...] = RECORD_TYPES,
    ) -> None:
        self._http = http
        self._resolver_url = resolver_url
        self._timeout = timeout
        self._record_types = record_types

    async def _query(self, domain: str, rrtype: str) -> RecordAnswer:
        """Run one record-type query, mapping failures to an error answer."""
        try:
            response = await self._http.get(
                self._resolver_url,
                params={"name": domain, "type": rrtype},
                headers={"Accept": "application/dns-json"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            return RecordAnswer(rrtype, error="timeout")
        except httpx.HTTPError as e:
            return RecordAnswer(rrtype, error=str(e)[:100] or "http_error")
        except ValueError:
            return RecordAnswer(rrtype, error="malformed")

        if not isinstance(data, dict):
            return RecordAnswer(rrtype, error="malformed")

        status = data.get("Status")
        answer = data.get("Answer")
        return RecordAnswer(
            rrtype,
            status=status if isinstance(status, int) else None,
            answers=len(answer) if isinstance(answer, list) else 0,
        )

    async def probe(self, domain: str) -> DnsProbeResult:
        """Fan out one query per record type and wait for all of them to settle."""
        settled = await asyncio.gather(
            *(self._query(domain, rrtype) for rrtype in self._record_types),
            return_exceptions=True,
        )

        answers = []
        for rrtype, outcome in zip(self._record_types, settled):
            if isinstance(outcome, BaseException):
                logger.debug("DNS %s query for %s failed: %r", rrtype, domain, outcome)
                answers.append(RecordAnswer(rrtype, error=type(outcome).__name__))
            else:
                answers.append(outcome)

        result = summarize(answers)
        logger.debug("DNS probe %s: %s", domain, result.status.value)
        return result
