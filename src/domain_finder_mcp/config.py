"""
Configuration for Domain Finder MCP.

The resolver receives an explicit ResolverConfig; nothing in the core
reads the environment at call time. load_config() builds one from the
user's machine.

API key lookup order:
1. macOS Keychain (if on macOS)
2. Environment variable (DOMAINR_API_KEY / WHOISXML_API_KEY)
3. Config file (fallback)
"""

import json
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

# Keychain service prefix, e.g. "domain-finder-mcp.registry"
KEYCHAIN_PREFIX = "domain-finder-mcp"

# Key name -> (environment variable, config file field)
API_KEYS = {
    "registry": ("DOMAINR_API_KEY", "registry_api_key"),
    "whois": ("WHOISXML_API_KEY", "whois_api_key"),
}

DEFAULT_CONCURRENCY = 5
DEFAULT_BATCH_DELAY_MS = 1000
DEFAULT_REGISTRY_TIMEOUT = 5.0
DEFAULT_DNS_TIMEOUT = 5.0
DEFAULT_WHOIS_TIMEOUT = 8.0
DEFAULT_DNS_RESOLVER_URL = "https://dns.google/resolve"
DEFAULT_MAX_TLDS_PER_NAME = 10


@dataclass(frozen=True)
class ResolverConfig:
    """Validated settings for the availability resolver."""

    registry_api_key: str | None = None
    whois_api_key: str | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    batch_delay_ms: int = DEFAULT_BATCH_DELAY_MS
    registry_timeout: float = DEFAULT_REGISTRY_TIMEOUT
    dns_timeout: float = DEFAULT_DNS_TIMEOUT
    whois_timeout: float = DEFAULT_WHOIS_TIMEOUT
    dns_resolver_url: str = DEFAULT_DNS_RESOLVER_URL
    max_tlds_per_name: int = DEFAULT_MAX_TLDS_PER_NAME
    use_iana_bootstrap: bool = False

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ConfigError("concurrency must be at least 1")
        if self.batch_delay_ms < 0:
            raise ConfigError("batch_delay_ms must be non-negative")
        if self.max_tlds_per_name < 1:
            raise ConfigError("max_tlds_per_name must be at least 1")
        for name in ("registry_timeout", "dns_timeout", "whois_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if not self.dns_resolver_url.startswith(("http://", "https://")):
            raise ConfigError("dns_resolver_url must be an http(s) URL")


def _is_macos() -> bool:
    """Check if running on macOS."""
    return sys.platform == "darwin"


def _security(action: str, name: str, *extra: str) -> subprocess.CompletedProcess | None:
    """Run a macOS `security` generic-password command for one stored key."""
    command = ["security", action, "-s", f"{KEYCHAIN_PREFIX}.{name}", "-a", name, *extra]
    try:
        return subprocess.run(command, capture_output=True, text=True)
    except (subprocess.SubprocessError, FileNotFoundError):
        return None


def _keychain_get(name: str) -> str | None:
    result = _security("find-generic-password", name, "-w")
    if result is None or result.returncode != 0:
        return None
    return result.stdout.strip() or None


def _keychain_set(name: str, key: str) -> bool:
    # -U updates an existing item in place
    result = _security("add-generic-password", name, "-w", key, "-U")
    return result is not None and result.returncode == 0


def _keychain_delete(name: str) -> bool:
    """Remove a stored key; a key that was never stored counts as deleted."""
    result = _security("delete-generic-password", name)
    if result is None:
        return False
    return result.returncode == 0 or "could not be found" in result.stderr.lower()


def get_config_dir() -> Path:
    """Get the config directory for this app."""
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('APPDATA', Path.home()))
    else:  # macOS, Linux
        base = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))

    return base / 'domain-finder-mcp'


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / 'config.json'


def read_config_file() -> dict:
    """Load the JSON config file, returning {} if missing or unreadable."""
    config_file = get_config_file()
    try:
        if config_file.exists():
            data = json.loads(config_file.read_text())
            if isinstance(data, dict):
                return data
    except (json.JSONDecodeError, OSError):
        pass
    return {}


def _write_config_file(config: dict) -> bool:
    try:
        get_config_dir().mkdir(parents=True, exist_ok=True)
        get_config_file().write_text(json.dumps(config, indent=2))
        return True
    except OSError:
        return False


def _check_key_name(name: str) -> tuple[str, str]:
    if name not in API_KEYS:
        raise ConfigError(f"Unknown API key '{name}'. Use one of: {', '.join(API_KEYS)}")
    return API_KEYS[name]


def get_api_key(name: str) -> str | None:
    """
    Get an API key ("registry" or "whois") from available sources.

    Lookup order:
    1. macOS Keychain (if on macOS)
    2. Environment variable
    3. Config file
    """
    env_var, field_name = _check_key_name(name)

    if _is_macos():
        if key := _keychain_get(name):
            return key

    if key := os.environ.get(env_var):
        return key

    if key := read_config_file().get(field_name):
        return key

    return None


def set_api_key(name: str, key: str) -> bool:
    """
    Store an API key.

    On macOS: Uses Keychain.
    On other platforms: Uses config file.
    """
    _, field_name = _check_key_name(name)

    if _is_macos():
        return _keychain_set(name, key)

    config = read_config_file()
    config[field_name] = key
    return _write_config_file(config)


def delete_api_key(name: str) -> bool:
    """Remove a stored API key."""
    _, field_name = _check_key_name(name)

    if _is_macos():
        return _keychain_delete(name)

    config = read_config_file()
    if field_name in config:
        del config[field_name]
        return _write_config_file(config)
    return True


def get_key_source(name: str) -> str | None:
    """Determine where an API key is stored (for display purposes)."""
    env_var, field_name = _check_key_name(name)

    if _is_macos() and _keychain_get(name):
        return "macOS Keychain"

    if os.environ.get(env_var):
        return "environment variable"

    if read_config_file().get(field_name):
        return "config file"

    return None


def _int_setting(env_var: str, field_name: str, file_config: dict, default: int) -> int:
    raw = os.environ.get(env_var, file_config.get(field_name, default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{env_var} must be an integer, got {raw!r}") from None


def _bool_setting(field_name: str, file_config: dict, default: bool) -> bool:
    raw = file_config.get(field_name, default)
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise ConfigError(f"{field_name} must be true or false, got {raw!r}")


def load_config() -> ResolverConfig:
    """Build a ResolverConfig from Keychain, environment and config file."""
    file_config = read_config_file()

    return ResolverConfig(
        registry_api_key=get_api_key("registry"),
        whois_api_key=get_api_key("whois"),
        concurrency=_int_setting(
            "DOMAIN_FINDER_CONCURRENCY", "concurrency", file_config, DEFAULT_CONCURRENCY
        ),
        batch_delay_ms=_int_setting(
            "DOMAIN_FINDER_BATCH_DELAY_MS", "batch_delay_ms", file_config, DEFAULT_BATCH_DELAY_MS
        ),
        use_iana_bootstrap=_bool_setting("use_iana_bootstrap", file_config, False),
    )
