"""
Data types shared by the lookup clients, the resolver and the server.
"""

from dataclasses import dataclass, field
from enum import Enum


class Confidence(Enum):
    """Reliability of an availability verdict. Display only."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Method(Enum):
    """Cascade layer that produced a verdict."""

    REGISTRY = "registry"
    DNS = "dns"
    HEURISTIC = "heuristic"
    UNKNOWN = "unknown"


class LookupStatus(Enum):
    """Normalized outcome of one registry query."""

    FOUND = "found"  # registered
    NOT_FOUND = "not_found"  # registry has no record
    ERROR = "error"  # transport failure, bad status, malformed payload
    TIMEOUT = "timeout"
    NO_ENDPOINT = "no_endpoint"  # TLD not in the registry table
    UNKNOWN = "unknown"  # answered, but nothing usable


class DnsStatus(Enum):
    """Diagnostic classification of a name-resolution probe."""

    CONFIGURED = "configured"
    REGISTERED_UNCONFIGURED = "registered_unconfigured"  # SOA only
    NXDOMAIN = "nxdomain"
    UNKNOWN = "unknown"
    ERROR = "error"  # every record query failed


@dataclass(frozen=True)
class LookupOutcome:
    """Result of one registry lookup."""

    status: LookupStatus
    detail: str = ""
    registration_date: str | None = None

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND

    @property
    def conclusive(self) -> bool:
        """True only when the registry confirmed either way."""
        return self.status in (LookupStatus.FOUND, LookupStatus.NOT_FOUND)


@dataclass(frozen=True)
class RecordAnswer:
    """Outcome of a single record-type query."""

    rrtype: str
    status: int | None = None  # DNS RCODE as reported by the resolver
    answers: int = 0
    error: str | None = None


@dataclass(frozen=True)
class DnsProbeResult:
    """Aggregated outcome of the parallel record-type queries."""

    has_records: bool
    all_absent: bool
    status: DnsStatus
    answers: tuple[RecordAnswer, ...] = ()


@dataclass(frozen=True)
class HeuristicEstimate:
    available: bool
    confidence: Confidence
    details: str = ""


@dataclass(frozen=True)
class ResolutionResult:
    """Final availability verdict for one candidate domain."""

    domain: str
    available: bool
    confidence: Confidence
    method: Method
    details: str
    elapsed_ms: float = 0.0
    registration_date: str | None = None

    @property
    def availability(self) -> str:
        """Display status: 'available' or 'taken'."""
        return "available" if self.available else "taken"

    @property
    def needs_verification(self) -> bool:
        """Low-confidence verdicts should be checked by hand before purchase."""
        return self.confidence == Confidence.LOW

    def to_dict(self) -> dict:
        data = {
            "domain": self.domain,
            "availability": self.availability,
            "confidence": self.confidence.value,
            "checkMethod": self.method.value,
            "details": self.details,
            "elapsedMs": round(self.elapsed_ms, 1),
        }
        if self.registration_date:
            data["registrationDate"] = self.registration_date
        return data


@dataclass(frozen=True)
class WhoisData:
    """Registration details for a taken domain."""

    registrar: str
    created_date: str | None = None
    expiry_date: str | None = None
    updated_date: str | None = None
    status: list[str] = field(default_factory=list)
    nameservers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "registrar": self.registrar,
            "createdDate": self.created_date,
            "expiryDate": self.expiry_date,
            "updatedDate": self.updated_date,
            "status": list(self.status),
            "nameservers": list(self.nameservers),
        }


@dataclass(frozen=True)
class SearchConstraints:
    """Constraints applied while expanding a seed keyword into candidates."""

    min_length: int = 3
    max_length: int = 15
    allow_numerics: bool = False
    allow_hyphens: bool = False
    prefixes: tuple[str, ...] = ()
    suffixes: tuple[str, ...] = ()


def split_domain(domain: str) -> tuple[str, str]:
    """Split 'name.tld' into (name, tld). The TLD is the last label."""
    domain = domain.strip().lower().rstrip(".")
    if "." not in domain:
        return domain, ""
    name, tld = domain.rsplit(".", 1)
    return name, tld
