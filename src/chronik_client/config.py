"""Configuration loading and management."""

from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomli
except ImportError:  # pragma: no cover
    import tomllib as tomli  # Python 3.11+

from chronik_client.errors import ConfigError


# Public eCash mainnet endpoints, tried in order
DEFAULT_URLS = [
    "https://chronik.e.cash",
    "https://chronik-native1.fabien.cash",
    "https://chronik-native2.fabien.cash",
]

DEFAULT_TIMEOUT = 10.0


@dataclass
class Config:
    """Client and server configuration."""

    # Endpoint settings
    urls: list[str] = field(default_factory=lambda: list(DEFAULT_URLS))
    timeout: float = DEFAULT_TIMEOUT  # seconds, per attempt

    # Safety settings
    allow_broadcast: bool = False
    skip_token_checks_default: bool = False


def load_config(path: Path) -> Config:
    """Load configuration from TOML file.

    Args:
        path: Path to config file

    Returns:
        Loaded configuration, merged with defaults

    Raises:
        ConfigError: If a value has the wrong type
    """
    if not path.exists():
        return Config()

    with open(path, "rb") as f:
        data = tomli.load(f)

    # Parse chronik section
    chronik = data.get("chronik", {})
    urls = chronik.get("urls", DEFAULT_URLS)
    if isinstance(urls, str):
        urls = [urls]
    if not isinstance(urls, list) or not all(isinstance(url, str) for url in urls):
        raise ConfigError(f"chronik.urls must be a list of strings, got {urls!r}")

    timeout = chronik.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(f"chronik.timeout must be a positive number, got {timeout!r}")

    # Parse safety section
    safety = data.get("safety", {})
    flags = {}
    for key in ("allow_broadcast", "skip_token_checks_default"):
        value = safety.get(key, False)
        if not isinstance(value, bool):
            raise ConfigError(f"safety.{key} must be true or false, got {value!r}")
        flags[key] = value

    return Config(urls=list(urls), timeout=float(timeout), **flags)
