"""Configuration loading and validation for wpsync."""

import json
from dataclasses import dataclass, field
from pathlib import Path

import yaml

REQUIRED_FIELDS = ("source_url", "wordpress_domain", "username", "apikey")

DEFAULT_CONFIG_FILE = "wphandbook.json"
DEFAULT_HASH_FILE = "wphandbook-hash.json"


class ConfigError(Exception):
    """Exception raised for a missing or malformed configuration."""
    pass


def _get_default_markdown(custom: dict) -> dict:
    """Get markdown rendering options with defaults applied."""
    return {
        "html": custom.get("html", True),
        "tables": custom.get("tables", True),
        "strikethrough": custom.get("strikethrough", True),
        "footnotes": custom.get("footnotes", False),
        "tasklists": custom.get("tasklists", False),
    }


@dataclass
class SyncConfig:
    """Configuration for one manifest-to-WordPress sync."""

    source_url: str
    wordpress_domain: str
    username: str
    apikey: str
    hash_file: Path = field(default_factory=lambda: Path(DEFAULT_HASH_FILE))
    collection: str = "pages"
    timeout: float = 30
    user_agent: str = "wpsync/1.0"
    post_status: str | None = None
    raw_github_urls: bool = True
    markdown: dict = field(default_factory=dict)

    def __post_init__(self):
        """Validate and normalize configuration."""
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"Missing required configuration parameter: '{name}'")

        self.wordpress_domain = self.wordpress_domain.rstrip("/")

        if not isinstance(self.collection, str) or not self.collection.strip("/"):
            raise ConfigError(f"'collection' must be a non-empty string, got {self.collection!r}")
        self.collection = self.collection.strip("/")

        if isinstance(self.hash_file, str) and self.hash_file:
            self.hash_file = Path(self.hash_file)
        if not isinstance(self.hash_file, Path):
            raise ConfigError(f"'hash_file' must be a file path, got {self.hash_file!r}")

        if not isinstance(self.user_agent, str):
            raise ConfigError(f"'user_agent' must be a string, got {self.user_agent!r}")

        if self.post_status is not None and not isinstance(self.post_status, str):
            raise ConfigError(f"'post_status' must be a string, got {self.post_status!r}")

        if not isinstance(self.raw_github_urls, bool):
            raise ConfigError(f"'raw_github_urls' must be true or false, got {self.raw_github_urls!r}")

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ConfigError(f"'timeout' must be a positive number, got {self.timeout!r}")

        if not isinstance(self.markdown, dict):
            raise ConfigError("'markdown' must be a mapping of rendering options")
        self.markdown = _get_default_markdown(self.markdown)


def load_config(path: Path | str = Path(DEFAULT_CONFIG_FILE)) -> SyncConfig:
    """Load and validate a configuration file.

    JSON is the normal format. Files ending in .yaml or .yml are read as
    YAML instead.

    Args:
        path: Path to the configuration file.

    Returns:
        SyncConfig instance with loaded configuration.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If configuration is invalid.
    """
    if isinstance(path, str):
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Error decoding configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        raise ConfigError(f"Missing required configuration parameters: {', '.join(missing)}")

    known = set(SyncConfig.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration parameters: {', '.join(unknown)}")

    return SyncConfig(**data)


def create_default_config(wordpress_domain: str, source_url: str) -> str:
    """Generate a default config file.

    Args:
        wordpress_domain: Root URL of the WordPress site.
        source_url: URL of the manifest JSON.

    Returns:
        JSON string with placeholder credentials.
    """
    config = f"""{{
    "source_url": "{source_url}",
    "wordpress_domain": "{wordpress_domain}",
    "username": "your_username",
    "apikey": "your_application_password",
    "hash_file": "{DEFAULT_HASH_FILE}",
    "collection": "pages",
    "timeout": 30,
    "post_status": null,
    "raw_github_urls": true,
    "markdown": {{
        "tables": true,
        "strikethrough": true,
        "footnotes": false,
        "tasklists": false
    }}
}}
"""
    return config
