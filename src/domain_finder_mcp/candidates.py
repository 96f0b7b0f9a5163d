"""
Candidate name generation: expands a seed keyword with prefixes and suffixes.
"""

import re

from .errors import ConfigError
from .models import SearchConstraints

# Bounds the batch size a single search can trigger
MAX_CANDIDATES = 20

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_DIGIT = re.compile(r"\d")


def clean_seed(seed: str) -> str:
    """Lowercase and strip everything except a-z and 0-9."""
    return _NON_ALNUM.sub("", seed.lower())


def meets_constraints(name: str, constraints: SearchConstraints) -> bool:
    if not constraints.min_length <= len(name) <= constraints.max_length:
        return False
    if not constraints.allow_numerics and _DIGIT.search(name):
        return False
    if not constraints.allow_hyphens and "-" in name:
        return False
    if name.startswith("-") or name.endswith("-"):
        return False
    return re.fullmatch(r"[a-z0-9-]+", name) is not None


def generate_candidates(
    seed: str,
    constraints: SearchConstraints,
    limit: int = MAX_CANDIDATES,
) -> list[str]:
    """
    Expand a seed into base names: seed, prefix+seed, seed+suffix and
    prefix+seed+suffix, filtered by the constraints.

    Returns a sorted, de-duplicated list of at most `limit` names.
    """
    if constraints.min_length < 1 or constraints.max_length < constraints.min_length:
        raise ConfigError(
            f"Invalid length bounds [{constraints.min_length}, {constraints.max_length}]"
        )

    base = clean_seed(seed)
    if not base:
        return []

    prefixes = [p.strip().lower() for p in constraints.prefixes if p.strip()]
    suffixes = [s.strip().lower() for s in constraints.suffixes if s.strip()]

    variations = {base}
    variations.update(prefix + base for prefix in prefixes)
    variations.update(base + suffix for suffix in suffixes)
    variations.update(prefix + base + suffix for prefix in prefixes for suffix in suffixes)

    # Shortest first so the cap keeps the most brandable names
    ordered = sorted(variations, key=lambda name: (len(name), name))
    return [name for name in ordered if meets_constraints(name, constraints)][:limit]
