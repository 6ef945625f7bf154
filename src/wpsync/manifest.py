"""Manifest loading: the remote JSON list of Markdown documents to sync."""

import json
from dataclasses import dataclass
from typing import Any, Callable

from wpsync.fetcher import FetchError, fetch_bytes
from wpsync.utils import get_logger, to_raw_url

SOURCE_FIELDS = ("file_url", "markdown_url")


class ManifestFetchError(FetchError):
    """Exception raised when the manifest itself cannot be fetched."""
    pass


class ManifestParseError(Exception):
    """Exception raised when the manifest is not a valid list or mapping of entries."""
    pass


class ValidationError(Exception):
    """Exception raised for a manifest entry missing required fields."""
    pass


@dataclass(frozen=True)
class ManifestEntry:
    """One document to sync."""

    slug: str
    source_url: str
    parent_slug: str | None = None
    order: int = 0
    collection: str | None = None
    content_id: int | None = None
    name: str | None = None

    @property
    def label(self) -> str:
        """Human readable name for log lines."""
        return self.name or self.slug


@dataclass
class ManifestProblem:
    """An entry rejected while parsing the manifest."""

    label: str
    source_url: str | None
    reason: str


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_entry(item: Any, name: str | None = None, raw_github_urls: bool = True) -> ManifestEntry:
    """Build a ManifestEntry from one raw manifest item.

    Args:
        item: Decoded JSON object for the entry.
        name: Mapping key when the manifest is a mapping of named entries.
        raw_github_urls: Rewrite GitHub blob URLs to raw file URLs.

    Returns:
        Validated ManifestEntry.

    Raises:
        ValidationError: If required fields are missing or malformed.
    """
    if not isinstance(item, dict):
        raise ValidationError(f"entry must be an object, got {type(item).__name__}")

    slug = _optional_str(item.get("slug"))
    source_url = None
    for key in SOURCE_FIELDS:
        source_url = _optional_str(item.get(key))
        if source_url:
            break

    if not slug or not source_url:
        missing = []
        if not slug:
            missing.append("slug")
        if not source_url:
            missing.append(" or ".join(SOURCE_FIELDS))
        raise ValidationError(f"missing required field(s): {', '.join(missing)}")

    order = item.get("order", 0)
    if order is None:
        order = 0
    if isinstance(order, bool):
        raise ValidationError(f"'order' must be an integer, got {order!r}")
    try:
        order = int(order)
    except (TypeError, ValueError):
        raise ValidationError(f"'order' must be an integer, got {order!r}")

    content_id = item.get("content_id")
    if content_id in (None, ""):
        content_id = None
    else:
        try:
            content_id = int(content_id)
        except (TypeError, ValueError):
            raise ValidationError(f"'content_id' must be an integer, got {content_id!r}")

    if raw_github_urls:
        source_url = to_raw_url(source_url)

    return ManifestEntry(
        slug=slug,
        source_url=source_url,
        parent_slug=_optional_str(item.get("parent")),
        order=order,
        collection=_optional_str(item.get("endpoint")),
        content_id=content_id,
        name=name,
    )


def parse_manifest(
    data: Any,
    raw_github_urls: bool = True,
) -> tuple[list[ManifestEntry], list[ManifestProblem]]:
    """Parse a decoded manifest into entries.

    The manifest is either an ordered list of entries or a mapping of named
    entries (mapping order is kept). Invalid entries are logged and returned
    separately instead of aborting the run.

    Args:
        data: Decoded manifest JSON.
        raw_github_urls: Rewrite GitHub blob URLs to raw file URLs.

    Returns:
        Tuple of (valid entries, rejected entries).

    Raises:
        ManifestParseError: If the manifest is neither a list nor a mapping.
    """
    logger = get_logger()

    if isinstance(data, list):
        items = [(None, item) for item in data]
    elif isinstance(data, dict):
        items = [(str(key), item) for key, item in data.items()]
    else:
        raise ManifestParseError(
            f"Manifest must be a list or an object of entries, got {type(data).__name__}"
        )

    entries = []
    problems = []
    seen_slugs = set()

    for index, (name, item) in enumerate(items):
        try:
            entry = parse_entry(item, name=name, raw_github_urls=raw_github_urls)
            if entry.slug in seen_slugs:
                raise ValidationError(f"duplicate slug '{entry.slug}'")
            seen_slugs.add(entry.slug)
        except ValidationError as e:
            label = name or (item.get("slug") if isinstance(item, dict) else None) or f"#{index}"
            source = None
            if isinstance(item, dict):
                source = next((item[k] for k in SOURCE_FIELDS if item.get(k)), None)
            logger.warning(f"Skipping manifest entry {label}: {e}")
            problems.append(ManifestProblem(label=str(label), source_url=source, reason=str(e)))
            continue
        entries.append(entry)

    return entries, problems


def fetch_manifest(
    url: str,
    timeout: float = 30,
    user_agent: str = "wpsync/1.0",
    fetch_func: Callable | None = None,
) -> Any:
    """Fetch and decode the manifest JSON.

    Raises:
        ManifestFetchError: If the manifest cannot be fetched.
        ManifestParseError: If the body is not valid JSON.
    """
    logger = get_logger()
    logger.info(f"Reading manifest from {url}")

    body = fetch_bytes(
        url,
        timeout=timeout,
        user_agent=user_agent,
        fetch_func=fetch_func,
        error_class=ManifestFetchError,
    )

    try:
        return json.loads(body.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestParseError(f"Error decoding manifest {url}: {e}") from e
