"""Fetching manifests and Markdown sources over HTTP."""

from typing import Callable

import requests

from wpsync.utils import get_logger


class FetchError(Exception):
    """Exception raised when a remote document cannot be fetched."""
    pass


class EntryFetchError(FetchError):
    """Exception raised when a manifest entry's Markdown source cannot be fetched."""
    pass


def fetch_bytes(
    url: str,
    timeout: float = 30,
    user_agent: str = "wpsync/1.0",
    fetch_func: Callable | None = None,
    error_class: type[FetchError] = FetchError,
) -> bytes:
    """Fetch a remote document as raw bytes.

    No retries are made: a failed request is reported once and the caller
    decides whether the run can continue.

    Args:
        url: URL to fetch.
        timeout: Request timeout in seconds.
        user_agent: User agent string.
        fetch_func: Optional custom fetch function for testing. Called with
            the URL, it returns bytes or str.
        error_class: FetchError subclass to raise on failure.

    Returns:
        Response body as bytes.

    Raises:
        FetchError: If the request fails or returns an error status.
    """
    logger = get_logger()

    if fetch_func:
        try:
            data = fetch_func(url)
        except Exception as e:
            raise error_class(f"Failed to fetch {url}: {e}") from e
        if isinstance(data, str):
            data = data.encode("utf-8")
        return data

    headers = {"User-Agent": user_agent}

    try:
        response = requests.get(url, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise error_class(f"Timeout fetching {url} after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise error_class(f"Failed to fetch {url}: {e}") from e

    logger.debug(f"GET {url} -> {response.status_code}")

    if response.status_code == 404:
        raise error_class(f"Document not found: {url}")

    if response.status_code >= 400:
        raise error_class(f"Failed to fetch {url}: HTTP {response.status_code}")

    return response.content
