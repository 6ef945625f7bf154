"""WordPress REST API client for wpsync.

The client is the per-run context object: it owns the credentials, the HTTP
session and the slug -> page id cache. Nothing here is module-level state, so
two clients never share a cache.
"""

from typing import Any

import requests

from wpsync.utils import api_base_url, get_logger

# "any" needs an authenticated user with edit rights, which the client always is
SLUG_QUERY = {"per_page": 1, "status": "any", "context": "edit"}


class PublishError(Exception):
    """Exception raised when a request to the WordPress API fails."""

    def __init__(self, message: str, endpoint: str, body: str = ""):
        super().__init__(message)
        self.endpoint = endpoint
        self.body = body


class TransportError(PublishError):
    """The request never produced an HTTP response (connection error, timeout)."""
    pass


class ApiResponseError(PublishError):
    """The API answered with a client or server error status."""

    def __init__(self, message: str, endpoint: str, status_code: int, body: str = ""):
        super().__init__(message, endpoint, body)
        self.status_code = status_code


class WordPressClient:
    """Authenticated access to the pages of one WordPress site."""

    def __init__(
        self,
        wordpress_domain: str,
        username: str,
        apikey: str,
        timeout: float = 30,
        user_agent: str = "wpsync/1.0",
        session: requests.Session | None = None,
    ):
        self.api_url = api_base_url(wordpress_domain)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (username, apikey)
        self.session.headers.update({"User-Agent": user_agent})
        self._slug_ids: dict[tuple[str, str], int] = {}

    @classmethod
    def from_config(cls, config, session: requests.Session | None = None) -> "WordPressClient":
        """Create a client from a SyncConfig."""
        return cls(
            wordpress_domain=config.wordpress_domain,
            username=config.username,
            apikey=config.apikey,
            timeout=config.timeout,
            user_agent=config.user_agent,
            session=session,
        )

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Send one API request and decode the JSON response.

        Raises:
            TransportError: If no response was received.
            ApiResponseError: If the response status is 400 or above.
        """
        logger = get_logger()
        url = self.api_url + endpoint.lstrip("/")

        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Timeout after {self.timeout}s: {url}", url) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request error for {url}: {e}", url) from e

        logger.debug(f"HTTP response code: {response.status_code}")
        if response.status_code >= 400:
            raise ApiResponseError(
                f"API response error {response.status_code} for {url}: {response.text[:200]}",
                url,
                response.status_code,
                response.text,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ApiResponseError(
                f"Invalid JSON in response from {url}",
                url,
                response.status_code,
                response.text,
            ) from e

    def find_page_by_slug(self, slug: str, collection: str = "pages") -> dict | None:
        """Look up a page by exact slug.

        The query asks for a single result in any status, so drafts and
        private pages created by earlier runs are found too. If the API still
        returns several records the first one is used and the rest ignored.

        Returns:
            The page record, or None when no page has this slug.
        """
        records = self._request("GET", collection, params=SLUG_QUERY | {"slug": slug})
        if isinstance(records, list) and records:
            return records[0]
        return None

    def get_page_id_by_slug(self, slug: str, collection: str = "pages") -> int | None:
        """Resolve a slug to a page id, memoized for the lifetime of the client.

        Returns:
            The page id, or None when no page has this slug. Misses are not
            cached so a page created later in the run can still be found.
        """
        logger = get_logger()
        key = (collection, slug)

        if key in self._slug_ids:
            logger.debug(f"Slug cache hit: {slug} -> {self._slug_ids[key]}")
            return self._slug_ids[key]

        page = self.find_page_by_slug(slug, collection)
        if page is None or "id" not in page:
            return None

        self._slug_ids[key] = page["id"]
        return page["id"]

    def remember(self, slug: str, page_id: int, collection: str = "pages") -> None:
        """Record a known slug -> id mapping, e.g. for a page just created."""
        self._slug_ids[(collection, slug)] = page_id

    def _write(self, endpoint: str, payload: dict) -> dict:
        """POST a page payload and require a page object back."""
        record = self._request("POST", endpoint, json=payload)
        if not isinstance(record, dict):
            url = self.api_url + endpoint.lstrip("/")
            raise ApiResponseError(
                f"Expected a page object from {url}, got {type(record).__name__}",
                url,
                200,
                repr(record)[:200],
            )
        return record

    def create_page(self, collection: str, payload: dict) -> dict:
        """Create a page in the collection."""
        return self._write(collection, payload)

    def update_page(self, collection: str, page_id: int, payload: dict) -> dict:
        """Update an existing page by id."""
        return self._write(f"{collection}/{page_id}", payload)
