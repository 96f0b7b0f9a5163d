"""Custom exceptions for domain-finder-mcp."""


class DomainFinderError(Exception):
    """Base exception for this project."""


class ConfigError(DomainFinderError):
    """Raised when resolver configuration or search constraints are invalid."""
