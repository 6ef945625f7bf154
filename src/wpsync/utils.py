"""Utility functions for wpsync - logging, hashing, URL handling."""

import hashlib
import logging
import re
import sys


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Set up logging with appropriate level.

    Args:
        verbose: If True, set to DEBUG level.
        quiet: If True, set to WARNING level.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger("wpsync")

    # Clear existing handlers
    logger.handlers = []

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    # Format: [LEVEL] message
    formatter = logging.Formatter("[%(levelname)s] %(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the wpsync logger instance."""
    return logging.getLogger("wpsync")


def content_hash(data: bytes | str) -> str:
    """Return the hex SHA-256 digest of raw source content.

    Used only for change detection. Text is UTF-8 encoded first.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def api_base_url(wordpress_domain: str) -> str:
    """Build the WordPress REST API base URL for a site.

    Args:
        wordpress_domain: Site root, e.g. "https://example.com" or
            "https://example.com/blog/".

    Returns:
        API base ending in a slash, e.g. "https://example.com/wp-json/wp/v2/".
    """
    return wordpress_domain.rstrip("/") + "/wp-json/wp/v2/"


_GITHUB_BLOB_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+)/blob/(?P<path>.+)$"
)


def to_raw_url(url: str) -> str:
    """Rewrite a GitHub "blob" page URL to its raw file URL.

    Examples:
        https://github.com/org/repo/blob/main/index.md
            -> https://raw.githubusercontent.com/org/repo/main/index.md

    Any other URL is returned unchanged.
    """
    match = _GITHUB_BLOB_RE.match(url)
    if not match:
        return url
    # Drop any query string or fragment, raw.githubusercontent ignores them
    path = match.group("path").split("?", 1)[0].split("#", 1)[0]
    return f"https://raw.githubusercontent.com/{match.group('owner')}/{match.group('repo')}/{path}"
