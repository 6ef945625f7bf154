"""Shared fixtures: an in-memory stand-in for the WordPress REST API."""

import json

import pytest
import requests

from wpsync.client import WordPressClient
from wpsync.config import SyncConfig

API = "https://wp.example.com/wp-json/wp/v2/"


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.text = json.dumps(payload) if payload is not None else ""
        self.content = self.text.encode("utf-8")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Records requests and answers like a tiny WordPress pages API."""

    def __init__(self, pages=None):
        self.auth = None
        self.headers = {}
        self.calls = []
        self.timeouts = []
        self.pages = {}  # id -> page record
        self.next_id = 100
        self.fail_posts = None  # exception instance or status code
        for page in pages or []:
            self.pages[page["id"]] = dict(page)

    def request(self, method, url, timeout=None, params=None, json=None):
        self.calls.append((method, url, params, json))
        self.timeouts.append(timeout)
        endpoint = url[len(API):]

        if method == "GET":
            # like WordPress, only published pages are listed unless status=any
            slug = params["slug"]
            matches = [
                p for p in self.pages.values()
                if p["slug"] == slug
                and (params.get("status") == "any" or p.get("status", "publish") == "publish")
            ]
            return FakeResponse(200, matches[: params.get("per_page", 10)])

        if isinstance(self.fail_posts, Exception):
            raise self.fail_posts
        if isinstance(self.fail_posts, int):
            return FakeResponse(self.fail_posts, {"code": "rest_error", "message": "nope"})

        parts = endpoint.split("/")
        if len(parts) == 2:
            page_id = int(parts[1])
            if page_id not in self.pages:
                return FakeResponse(404, {"code": "rest_post_invalid_id"})
            self.pages[page_id].update(json)
        else:
            page_id = self.next_id
            self.next_id += 1
            self.pages[page_id] = {"id": page_id, "status": "draft", **json}
        page = self.pages[page_id]
        return FakeResponse(200, {**page, "link": f"https://wp.example.com/{page['slug']}/"})

    def posts(self):
        return [c for c in self.calls if c[0] == "POST"]

    def gets(self):
        return [c for c in self.calls if c[0] == "GET"]


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return WordPressClient("https://wp.example.com", "editor", "app-pass", session=session)


@pytest.fixture
def config(tmp_path):
    return SyncConfig(
        source_url="https://example.com/manifest.json",
        wordpress_domain="https://wp.example.com",
        username="editor",
        apikey="app-pass",
        hash_file=tmp_path / "hashes.json",
    )


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
