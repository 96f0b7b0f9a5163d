"""
Test suite for configuration loading and API key storage

Usage:
    pytest test_config.py
"""

import json
import subprocess

import pytest

from domain_finder_mcp import config
from domain_finder_mcp.config import ResolverConfig
from domain_finder_mcp.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Point the config dir at a temp dir and keep the real Keychain out of it."""
    monkeypatch.setattr(config, "_is_macos", lambda: False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    for var in (
        "DOMAINR_API_KEY",
        "WHOISXML_API_KEY",
        "DOMAIN_FINDER_CONCURRENCY",
        "DOMAIN_FINDER_BATCH_DELAY_MS",
    ):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def test_defaults():
    cfg = ResolverConfig()
    assert cfg.concurrency == 5
    assert cfg.batch_delay_ms == 1000
    assert cfg.registry_timeout == 5.0
    assert cfg.whois_timeout == 8.0
    assert cfg.max_tlds_per_name == 10
    assert cfg.registry_api_key is None
    assert cfg.whois_api_key is None


@pytest.mark.parametrize("kwargs", [
    {"concurrency": 0},
    {"batch_delay_ms": -1},
    {"registry_timeout": 0},
    {"dns_timeout": -2.0},
    {"max_tlds_per_name": 0},
    {"dns_resolver_url": "dns.google/resolve"},
])
def test_invalid_values_raise(kwargs):
    with pytest.raises(ConfigError):
        ResolverConfig(**kwargs)


def test_load_config_reads_environment(monkeypatch):
    monkeypatch.setenv("DOMAINR_API_KEY", "domainr-key")
    monkeypatch.setenv("WHOISXML_API_KEY", "whois-key")
    monkeypatch.setenv("DOMAIN_FINDER_CONCURRENCY", "3")
    monkeypatch.setenv("DOMAIN_FINDER_BATCH_DELAY_MS", "250")

    cfg = config.load_config()
    assert cfg.registry_api_key == "domainr-key"
    assert cfg.whois_api_key == "whois-key"
    assert cfg.concurrency == 3
    assert cfg.batch_delay_ms == 250


def test_load_config_reads_config_file():
    config.get_config_dir().mkdir(parents=True)
    config.get_config_file().write_text(json.dumps({
        "whois_api_key": "from-file",
        "concurrency": 2,
        "use_iana_bootstrap": True,
    }))

    cfg = config.load_config()
    assert cfg.whois_api_key == "from-file"
    assert cfg.registry_api_key is None
    assert cfg.concurrency == 2
    assert cfg.use_iana_bootstrap is True


def test_bad_integer_setting_raises(monkeypatch):
    monkeypatch.setenv("DOMAIN_FINDER_CONCURRENCY", "lots")
    with pytest.raises(ConfigError):
        config.load_config()


def test_environment_wins_over_config_file(monkeypatch):
    assert config.set_api_key("registry", "file-key")
    monkeypatch.setenv("DOMAINR_API_KEY", "env-key")

    assert config.get_api_key("registry") == "env-key"
    assert config.get_key_source("registry") == "environment variable"


def test_set_and_delete_api_key(isolated_config):
    assert config.set_api_key("whois", "abc123")
    assert config.get_api_key("whois") == "abc123"
    assert config.get_key_source("whois") == "config file"
    assert config.get_config_file().parent == isolated_config / "domain-finder-mcp"

    assert config.delete_api_key("whois")
    assert config.get_api_key("whois") is None
    assert config.get_key_source("whois") is None


def test_unknown_key_name_raises():
    with pytest.raises(ConfigError):
        config.get_api_key("godaddy")


def test_corrupt_config_file_is_ignored():
    config.get_config_dir().mkdir(parents=True)
    config.get_config_file().write_text("{not json")
    assert config.read_config_file() == {}
    assert config.load_config() == ResolverConfig()


@pytest.mark.parametrize("raw,expected", [
    (True, True),
    (False, False),
    ("false", False),
    ("FALSE", False),
    ("true", True),
    (" True ", True),
])
def test_bootstrap_flag_accepts_boolean_spellings(raw, expected):
    config.get_config_dir().mkdir(parents=True)
    config.get_config_file().write_text(json.dumps({"use_iana_bootstrap": raw}))
    assert config.load_config().use_iana_bootstrap is expected


@pytest.mark.parametrize("raw", ["no", "1", 1, None, []])
def test_bootstrap_flag_rejects_other_values(raw):
    config.get_config_dir().mkdir(parents=True)
    config.get_config_file().write_text(json.dumps({"use_iana_bootstrap": raw}))
    with pytest.raises(ConfigError):
        config.load_config()


class FakeSecurity:
    """Stands in for the macOS `security` tool with an in-memory keychain."""

    def __init__(self):
        self.items = {}
        self.commands = []

    def __call__(self, command, capture_output, text):
        self.commands.append(command)
        action = command[1]
        service, account = command[3], command[5]
        item = (service, account)
        if action == "find-generic-password":
            if item in self.items:
                return subprocess.CompletedProcess(command, 0, self.items[item] + "\n", "")
            return subprocess.CompletedProcess(command, 44, "", "could not be found")
        if action == "add-generic-password":
            self.items[item] = command[command.index("-w") + 1]
            return subprocess.CompletedProcess(command, 0, "", "")
        if self.items.pop(item, None) is None:
            return subprocess.CompletedProcess(command, 44, "", "The specified item could not be found in the keychain.")
        return subprocess.CompletedProcess(command, 0, "", "")


@pytest.fixture
def keychain(monkeypatch):
    fake = FakeSecurity()
    monkeypatch.setattr(config, "_is_macos", lambda: True)
    monkeypatch.setattr(config.subprocess, "run", fake)
    return fake


def test_keychain_stores_keys_per_name(keychain):
    assert config.set_api_key("registry", "kc-key")
    assert keychain.items == {("domain-finder-mcp.registry", "registry"): "kc-key"}
    assert config.get_api_key("registry") == "kc-key"
    assert config.get_key_source("registry") == "macOS Keychain"
    assert config.get_api_key("whois") is None
    # Nothing is written to the config file on macOS
    assert not config.get_config_file().exists()


def test_keychain_wins_over_environment(keychain, monkeypatch):
    config.set_api_key("whois", "kc-key")
    monkeypatch.setenv("WHOISXML_API_KEY", "env-key")
    assert config.get_api_key("whois") == "kc-key"


def test_keychain_delete_missing_key_succeeds(keychain):
    assert config.delete_api_key("registry")
    config.set_api_key("registry", "kc-key")
    assert config.delete_api_key("registry")
    assert config.get_api_key("registry") is None


def test_missing_security_tool_falls_back(monkeypatch):
    def no_security(command, capture_output, text):
        raise FileNotFoundError("security")

    monkeypatch.setattr(config, "_is_macos", lambda: True)
    monkeypatch.setattr(config.subprocess, "run", no_security)
    monkeypatch.setenv("DOMAINR_API_KEY", "env-key")

    assert config.get_api_key("registry") == "env-key"
    assert config.set_api_key("registry", "x") is False
    assert config.delete_api_key("registry") is False
