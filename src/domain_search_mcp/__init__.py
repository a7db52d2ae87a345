"""
Domain Search MCP Server

An MCP server for checking domain name availability across several providers,
with automatic fallback, pricing, ranking and name suggestions.
"""

__version__ = "0.2.0"

# Credential name -> (label, where to get one, secret?)
SETUP_PROMPTS = {
    "vercel_token": ("Vercel API token", "https://vercel.com/account/tokens", True),
    "vercel_team_id": ("Vercel team ID (optional)", "Vercel team settings", False),
    "api_ninjas_key": ("API Ninjas key", "https://api-ninjas.com/profile", True),
    "rapidapi_key": ("RapidAPI key (Domains API)", "https://rapidapi.com/developer/apps", True),
}


def main():
    """Main entry point for the CLI."""
    import sys

    # Handle CLI arguments before importing heavy dependencies
    if "--help" in sys.argv or "-h" in sys.argv:
        print_help()
        sys.exit(0)

    if "--version" in sys.argv or "-V" in sys.argv:
        print(f"domain-search-mcp {__version__}")
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
    print(f"""domain-search-mcp {__version__}

An MCP server for checking domain name availability with provider fallback.

Usage:
    domain-search-mcp               Run the MCP server
    domain-search-mcp --setup       Configure API credentials interactively
    domain-search-mcp --show-config Show current configuration
    domain-search-mcp --version     Show version
    domain-search-mcp --help        Show this help

Providers (tried in this order, each only if configured):
    1. Vercel registrar API   VERCEL_TOKEN, VERCEL_TEAM_ID (includes pricing)
    2. API Ninjas             API_NINJAS_KEY
    3. RapidAPI Domains       RAPIDAPI_KEY, RAPIDAPI_HOST

    Credentials are read from the macOS Keychain, then environment
    variables, then the config file.

    With no provider configured every lookup reports the domain as
    unavailable and flags the result as degraded.

Claude Code Setup:
    Add to ~/.claude/settings.json:
    {{
      "mcpServers": {{
        "domain-search": {{
          "command": "uvx",
          "args": ["domain-search-mcp"]
        }}
      }}
    }}
""")


def run_setup():
    """Interactive setup wizard."""
    import getpass
    from .config import get_credential, set_credential, get_config_file

    print("=" * 50)
    print("Domain Search MCP - Setup")
    print("=" * 50)
    print()
    print("Press Enter to skip a credential (the provider will be left out).")

    for name, (label, where, secret) in SETUP_PROMPTS.items():
        print()
        current = get_credential(name)
        if current:
            print(f"Current {label}: {mask_key(current)}")
            response = input("Update? [y/N]: ").strip().lower()
            if response != "y":
                continue

        print(f"{label} (get one at: {where})")
        prompt = f"{label}: "
        value = (getpass.getpass(prompt) if secret else input(prompt)).strip()

        if not value:
            print("  Skipped.")
            continue

        if set_credential(name, value):
            print("  ✓ Saved")
            if name == "vercel_token":
                test_vercel_token(value, get_credential("vercel_team_id"))
        else:
            print(f"  ✗ Failed to save (config file: {get_config_file()})")

    print()
    print("Setup complete!")


def show_config():
    """Show current configuration."""
    from .config import CREDENTIALS, get_config_file, get_credential, get_credential_source

    print("Configuration")
    print("=" * 50)
    print()

    config_file = get_config_file()
    print(f"Config file: {config_file}")
    print(f"  Exists: {config_file.exists()}")
    print()

    for name, (env_var, _) in CREDENTIALS.items():
        value = get_credential(name)
        if value:
            shown = value if name == "rapidapi_host" else mask_key(value)
            print(f"{env_var}: {shown}")
            print(f"  Source: {get_credential_source(name)}")
        else:
            print(f"{env_var}: Not configured")


def mask_key(key: str) -> str:
    """Mask an API key for display."""
    if len(key) > 8:
        return key[:4] + "*" * (len(key) - 8) + key[-4:]
    elif len(key) > 4:
        return key[:2] + "*" * (len(key) - 2)
    else:
        return "*" * len(key)


def test_vercel_token(token: str, team_id: str | None = None):
    """Test a Vercel token against the supported-TLDs endpoint."""
    import httpx

    print("\nTesting Vercel API...")
    params = {"teamId": team_id} if team_id else None

    try:
        response = httpx.get(
            "https://api.vercel.com/v1/registrar/tlds/supported",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
            timeout=10
        )
    except httpx.HTTPError as e:
        print(f"✗ Test failed: {e}")
        return

    if response.is_success:
        print("✓ Token is valid")
    else:
        print(f"✗ API error: HTTP {response.status_code}")
