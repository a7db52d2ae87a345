"""
Configuration storage for Domain Search MCP.

On macOS: Uses Keychain for secure credential storage.
On other platforms: Falls back to config file.

Credential lookup order:
1. macOS Keychain (if on macOS)
2. Environment variable (VERCEL_TOKEN, API_NINJAS_KEY, ...)
3. Config file (fallback)
"""

import json
import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

# Keychain service prefix, one entry per credential
KEYCHAIN_SERVICE_PREFIX = "domain-search-mcp"

DEFAULT_RAPIDAPI_HOST = "domains-api.p.rapidapi.com"

# Provider priority. The resolver never reorders this.
PROVIDER_ORDER = ["vercel", "apininjas", "rapidapi"]

# name -> (environment variable, config file key)
CREDENTIALS = {
    "vercel_token": ("VERCEL_TOKEN", "vercel_token"),
    "vercel_team_id": ("VERCEL_TEAM_ID", "vercel_team_id"),
    "api_ninjas_key": ("API_NINJAS_KEY", "api_ninjas_key"),
    "rapidapi_key": ("RAPIDAPI_KEY", "rapidapi_key"),
    "rapidapi_host": ("RAPIDAPI_HOST", "rapidapi_host"),
}


@dataclass
class ResolverConfig:
    """Which providers may run and the credentials they need."""
    vercel_token: str | None = None
    vercel_team_id: str | None = None
    apininjas_key: str | None = None
    rapidapi_key: str | None = None
    rapidapi_host: str = DEFAULT_RAPIDAPI_HOST
    providers: list[str] = field(default_factory=lambda: list(PROVIDER_ORDER))
    timeout: float = 10.0


def _is_macos() -> bool:
    """Check if running on macOS."""
    return sys.platform == "darwin"


def _keychain_get(service: str, account: str) -> str | None:
    """Get a password from macOS Keychain."""
    try:
        result = subprocess.run(
            ["security", "find-generic-password", "-s", service, "-a", account, "-w"],
            capture_output=True,
            text=True
        )
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
    except (subprocess.SubprocessError, FileNotFoundError):
        pass
    return None


def _keychain_set(service: str, account: str, password: str) -> bool:
    """Store a password in macOS Keychain."""
    try:
        subprocess.run(
            ["security", "delete-generic-password", "-s", service, "-a", account],
            capture_output=True
        )
        result = subprocess.run(
            ["security", "add-generic-password", "-s", service, "-a", account, "-w", password, "-U"],
            capture_output=True
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError):
        return False


def _keychain_delete(service: str, account: str) -> bool:
    """Delete a password from macOS Keychain."""
    try:
        result = subprocess.run(
            ["security", "delete-generic-password", "-s", service, "-a", account],
            capture_output=True,
            text=True
        )
        return result.returncode == 0 or "could not be found" in result.stderr.lower()
    except (subprocess.SubprocessError, FileNotFoundError):
        return False


def _keychain_service(name: str) -> str:
    return f"{KEYCHAIN_SERVICE_PREFIX}.{name}"


def get_config_dir() -> Path:
    """Get the config directory for this app."""
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('APPDATA', Path.home()))
    else:  # macOS, Linux
        base = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))

    return base / 'domain-search-mcp'


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / 'config.json'


def load_config() -> dict:
    """Read the config file, returning an empty dict if missing or invalid."""
    config_file = get_config_file()
    try:
        if config_file.exists():
            config = json.loads(config_file.read_text())
            if isinstance(config, dict):
                return config
    except (json.JSONDecodeError, OSError):
        pass
    return {}


def _save_config(config: dict) -> bool:
    try:
        config_dir = get_config_dir()
        config_dir.mkdir(parents=True, exist_ok=True)
        get_config_file().write_text(json.dumps(config, indent=2))
        return True
    except OSError:
        return False


def get_credential(name: str) -> str | None:
    """
    Get a credential from available sources.

    Lookup order:
    1. macOS Keychain (if on macOS)
    2. Environment variable
    3. Config file
    """
    if name not in CREDENTIALS:
        raise KeyError(f"Unknown credential '{name}'")
    env_var, config_key = CREDENTIALS[name]

    # 1. Try macOS Keychain first
    if _is_macos():
        if value := _keychain_get(_keychain_service(name), name):
            return value

    # 2. Check environment variable
    if value := os.environ.get(env_var):
        return value

    # 3. Check config file (fallback)
    if value := load_config().get(config_key):
        return str(value)

    return None


def set_credential(name: str, value: str) -> bool:
    """
    Store a credential.

    On macOS: Uses Keychain.
    On other platforms: Uses config file.
    """
    if name not in CREDENTIALS:
        raise KeyError(f"Unknown credential '{name}'")

    if _is_macos():
        return _keychain_set(_keychain_service(name), name, value)

    config = load_config()
    config[CREDENTIALS[name][1]] = value
    return _save_config(config)


def delete_credential(name: str) -> bool:
    """Remove a stored credential."""
    if name not in CREDENTIALS:
        raise KeyError(f"Unknown credential '{name}'")

    if _is_macos():
        return _keychain_delete(_keychain_service(name), name)

    config = load_config()
    config_key = CREDENTIALS[name][1]
    if config_key not in config:
        return True
    del config[config_key]
    return _save_config(config)


def get_credential_source(name: str) -> str | None:
    """Determine where a credential is stored (for display purposes)."""
    env_var, config_key = CREDENTIALS[name]

    if _is_macos():
        if _keychain_get(_keychain_service(name), name):
            return "macOS Keychain"

    if os.environ.get(env_var):
        return "environment variable"

    if load_config().get(config_key):
        return "config file"

    return None


def load_resolver_config(timeout: float = 10.0) -> ResolverConfig:
    """Build a ResolverConfig from stored credentials."""
    return ResolverConfig(
        vercel_token=get_credential("vercel_token"),
        vercel_team_id=get_credential("vercel_team_id"),
        apininjas_key=get_credential("api_ninjas_key"),
        rapidapi_key=get_credential("rapidapi_key"),
        rapidapi_host=get_credential("rapidapi_host") or DEFAULT_RAPIDAPI_HOST,
        timeout=timeout,
    )
