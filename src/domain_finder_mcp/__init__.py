"""
Domain Finder MCP Server

An MCP server for finding available, brandable domain names using a
registry -> DNS -> heuristic availability cascade.
"""

__version__ = "0.1.0"


def main():
    """Main entry point for the CLI."""
    import sys

    # Handle CLI arguments before importing heavy dependencies
    if "--help" in sys.argv or "-h" in sys.argv:
        print_help()
        sys.exit(0)

    if "--version" in sys.argv or "-V" in sys.argv:
        print(f"domain-finder-mcp {__version__}")
        sys.exit(0)

    if "--setup" in sys.argv:
        run_setup()
        sys.exit(0)

    if "--show-config" in sys.argv:
        show_config()
        sys.exit(0)

    # Default: run the MCP server
    from .server import mcp
    mcp.run()


def print_help():
    """Print help message."""
    print(f"""domain-finder-mcp {__version__}

An MCP server for finding available, brandable domain names.

Usage:
    domain-finder-mcp               Run the MCP server
    domain-finder-mcp --setup       Configure API keys interactively
    domain-finder-mcp --show-config Show current configuration
    domain-finder-mcp --version     Show version
    domain-finder-mcp --help        Show this help

Configuration:
    The server works out of the box using RDAP and DNS-over-HTTPS
    (no API key required).

    Optional keys:
      DOMAINR_API_KEY    Domainr (RapidAPI) key, replaces RDAP for registry lookups
      WHOISXML_API_KEY   WhoisXML key, enables the whois_lookup tool

    Optional tuning:
      DOMAIN_FINDER_CONCURRENCY     Lookups per batch window (default 5)
      DOMAIN_FINDER_BATCH_DELAY_MS  Pause between windows (default 1000)
      DOMAIN_FINDER_DEBUG           Enable verbose HTTP logging
""")


def run_setup():
    """Interactive setup wizard."""
    import getpass
    from .config import get_api_key, set_api_key, get_config_file

    print("=" * 50)
    print("Domain Finder MCP - Setup")
    print("=" * 50)
    print()

    prompts = [
        ("registry", "Domainr (RapidAPI) key - optional, replaces RDAP registry lookups"),
        ("whois", "WhoisXML key - optional, enables WHOIS details for taken domains"),
    ]

    for name, description in prompts:
        current_key = get_api_key(name)
        if current_key:
            print(f"Current {name} key: {mask_key(current_key)}")
            response = input("Update this key? [y/N]: ").strip().lower()
            if response != "y":
                print()
                continue

        print(description)
        print("Press Enter to skip")
        key = getpass.getpass("API Key: ").strip()

        if key:
            if set_api_key(name, key):
                print(f"✓ {name} key saved")
            else:
                print(f"✗ Failed to save {name} key")
        else:
            print("✓ Skipped")
        print()

    print(f"Config file: {get_config_file()}")
    print("Setup complete!")


def show_config():
    """Show current configuration."""
    from .config import get_api_key, get_config_file, get_key_source, load_config
    from .errors import ConfigError

    print("Configuration")
    print("=" * 50)
    print()

    config_file = get_config_file()
    print(f"Config file: {config_file}")
    print(f"  Exists: {config_file.exists()}")
    print()

    for name in ("registry", "whois"):
        key = get_api_key(name)
        if key:
            print(f"{name} API key: {mask_key(key)}")
            print(f"  Source: {get_key_source(name)}")
        else:
            print(f"{name} API key: Not configured")

    print()
    try:
        config = load_config()
    except ConfigError as e:
        print(f"✗ Invalid configuration: {e}")
        return

    print(f"Concurrency: {config.concurrency} lookups per window")
    print(f"Batch delay: {config.batch_delay_ms} ms")
    print(f"IANA bootstrap: {'on' if config.use_iana_bootstrap else 'off'}")


def mask_key(key: str) -> str:
    """Mask an API key for display."""
    if len(key) > 8:
        return key[:4] + "*" * (len(key) - 8) + key[-4:]
    elif len(key) > 4:
        return key[:2] + "*" * (len(key) - 2)
    else:
        return "*" * len(key)
