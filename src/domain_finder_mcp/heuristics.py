"""
Statistical fallback used when neither the registry nor DNS gave a usable signal.
"""

import re

from .models import Confidence, HeuristicEstimate, split_domain

POPULAR_TLDS = frozenset({"com", "net", "org", "io", "ai", "co"})

SHORT_NAME_MAX = 6

_ALPHA_ONLY = re.compile(r"^[a-z]+$")


def estimate(domain: str) -> HeuristicEstimate:
    """
    Guess availability from the name alone. No I/O.

    Short alphabetic names on flagship TLDs are overwhelmingly registered.
    Anything else gets a low-confidence "taken": no evidence of registration
    is not evidence of availability.
    """
    name, tld = split_domain(domain)

    if tld in POPULAR_TLDS and len(name) <= SHORT_NAME_MAX and _ALPHA_ONLY.match(name):
        return HeuristicEstimate(
            available=False,
            confidence=Confidence.MEDIUM,
            details="Short dictionary word on popular TLD (likely taken)",
        )

    return HeuristicEstimate(
        available=False,
        confidence=Confidence.LOW,
        details="Unable to verify availability - verify manually",
    )
