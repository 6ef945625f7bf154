"""wpsync - publish Markdown documents from a manifest to WordPress pages."""

__version__ = "1.0.0"

from wpsync.config import SyncConfig, ConfigError, load_config, create_default_config
from wpsync.converter import markdown_to_html, split_title_and_content
from wpsync.client import WordPressClient, PublishError, TransportError, ApiResponseError
from wpsync.publisher import PublishResult, publish, publish_by_id
from wpsync.fingerprints import FingerprintStore, FingerprintStoreError
from wpsync.manifest import ManifestEntry, fetch_manifest, parse_manifest
from wpsync.sync import EntryState, SyncReport, run_sync

__all__ = [
    "__version__",
    "SyncConfig",
    "ConfigError",
    "load_config",
    "create_default_config",
    "markdown_to_html",
    "split_title_and_content",
    "WordPressClient",
    "PublishError",
    "TransportError",
    "ApiResponseError",
    "PublishResult",
    "publish",
    "publish_by_id",
    "FingerprintStore",
    "FingerprintStoreError",
    "ManifestEntry",
    "fetch_manifest",
    "parse_manifest",
    "EntryState",
    "SyncReport",
    "run_sync",
]
