"""Change-detecting sync of a manifest into WordPress pages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from wpsync.client import PublishError, WordPressClient
from wpsync.config import SyncConfig
from wpsync.fetcher import EntryFetchError, fetch_bytes
from wpsync.fingerprints import LEGACY_FILE_NAME, FingerprintStore
from wpsync.manifest import ManifestEntry, fetch_manifest, parse_manifest
from wpsync.publisher import PublishResult, publish, publish_by_id
from wpsync.utils import content_hash, get_logger


class EntryState(str, Enum):
    """Terminal state of one manifest entry after a run."""

    INVALID = "invalid"
    FETCH_FAILED = "fetch_failed"
    UNCHANGED = "unchanged"
    DRY_RUN = "dry_run"
    HASH_UPDATED = "hash_updated"
    PUBLISH_FAILED = "publish_failed"


@dataclass
class EntryOutcome:
    label: str
    source_url: str | None
    state: EntryState
    message: str = ""
    result: PublishResult | None = None


@dataclass
class SyncReport:
    """Per-entry outcomes of one run."""

    outcomes: list[EntryOutcome] = field(default_factory=list)

    def count(self, state: EntryState) -> int:
        return sum(1 for o in self.outcomes if o.state == state)

    @property
    def published(self) -> int:
        return self.count(EntryState.HASH_UPDATED)

    @property
    def unchanged(self) -> int:
        return self.count(EntryState.UNCHANGED)

    @property
    def failed(self) -> int:
        return self.count(EntryState.FETCH_FAILED) + self.count(EntryState.PUBLISH_FAILED)

    @property
    def skipped(self) -> int:
        return self.count(EntryState.INVALID)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def summary(self) -> str:
        return (
            f"{len(self.outcomes)} entries: {self.published} published, "
            f"{self.unchanged} unchanged, {self.failed} failed, {self.skipped} invalid"
        )


def sync_entry(
    entry: ManifestEntry,
    config: SyncConfig,
    client: WordPressClient,
    store: FingerprintStore,
    fetch_func: Callable | None = None,
    force: bool = False,
    dry_run: bool = False,
) -> EntryOutcome:
    """Process one manifest entry: fetch, compare, publish, record.

    The fingerprint is only updated after the publish succeeded.
    """
    logger = get_logger()
    logger.info(f"Processing {entry.label} from {entry.source_url}")

    try:
        raw = fetch_bytes(
            entry.source_url,
            timeout=config.timeout,
            user_agent=config.user_agent,
            fetch_func=fetch_func,
            error_class=EntryFetchError,
        )
    except EntryFetchError as e:
        logger.warning(f"Could not fetch {entry.source_url}: {e}")
        return EntryOutcome(entry.label, entry.source_url, EntryState.FETCH_FAILED, str(e))

    digest = content_hash(raw)

    if not force and store.matches(entry.source_url, raw):
        logger.info(f"No changes detected for {entry.source_url}, skipping")
        return EntryOutcome(entry.label, entry.source_url, EntryState.UNCHANGED)

    collection = entry.collection or config.collection

    if dry_run:
        target = f"{collection}/{entry.content_id}" if entry.content_id else f"{collection} slug '{entry.slug}'"
        logger.info(f"Would publish {entry.label} to {target}")
        return EntryOutcome(entry.label, entry.source_url, EntryState.DRY_RUN, target)

    markdown = raw.decode("utf-8", errors="replace")

    try:
        if entry.content_id is not None:
            result = publish_by_id(
                client,
                collection,
                entry.content_id,
                markdown,
                entry.slug,
                options=config.markdown,
            )
        else:
            result = publish(
                client,
                collection,
                markdown,
                entry.slug,
                parent_slug=entry.parent_slug,
                order=entry.order,
                options=config.markdown,
                post_status=config.post_status,
            )
    except PublishError as e:
        logger.warning(f"Failed to publish {entry.label}: {e}")
        return EntryOutcome(entry.label, entry.source_url, EntryState.PUBLISH_FAILED, str(e))

    action = "Created" if result.created else "Updated"
    logger.info(f"{action} {entry.label}: {result.link or 'No link provided'}")

    store.update(entry.source_url, digest)
    return EntryOutcome(entry.label, entry.source_url, EntryState.HASH_UPDATED, result=result)


def run_sync(
    config: SyncConfig,
    client: WordPressClient | None = None,
    fetch_func: Callable | None = None,
    force: bool = False,
    dry_run: bool = False,
) -> SyncReport:
    """Sync every manifest entry into WordPress.

    Fatal errors (fingerprint file, manifest fetch or parse) propagate before
    any entry is processed. Per-entry failures are recorded in the report and
    the run continues. The fingerprint file is saved after every successful
    publish and once more at the end.

    Args:
        config: Sync configuration.
        client: WordPress client. Created from config when omitted.
        fetch_func: Optional custom fetch function for testing, used for
            both the manifest and the Markdown sources.
        force: Publish every entry even if its content is unchanged.
        dry_run: Report what would be published without writing anything.

    Returns:
        SyncReport with one outcome per manifest entry.

    Raises:
        FingerprintStoreError: If the fingerprint file is corrupt.
        ManifestFetchError: If the manifest cannot be fetched.
        ManifestParseError: If the manifest is malformed.
    """
    logger = get_logger()

    legacy_path = config.hash_file.with_name(LEGACY_FILE_NAME)
    store = FingerprintStore.load(config.hash_file, legacy_path=legacy_path)
    logger.debug(f"Loaded {len(store)} fingerprint(s) from {config.hash_file}")

    data = fetch_manifest(
        config.source_url,
        timeout=config.timeout,
        user_agent=config.user_agent,
        fetch_func=fetch_func,
    )
    entries, problems = parse_manifest(data, raw_github_urls=config.raw_github_urls)
    logger.info(f"Manifest lists {len(entries)} valid entries")

    if client is None:
        client = WordPressClient.from_config(config)

    report = SyncReport()
    for problem in problems:
        report.outcomes.append(
            EntryOutcome(problem.label, problem.source_url, EntryState.INVALID, problem.reason)
        )

    try:
        for entry in entries:
            outcome = sync_entry(
                entry,
                config,
                client,
                store,
                fetch_func=fetch_func,
                force=force,
                dry_run=dry_run,
            )
            report.outcomes.append(outcome)
            if outcome.state == EntryState.HASH_UPDATED:
                store.save()
    finally:
        if not dry_run:
            store.save()

    logger.info(f"Sync complete: {report.summary()}")
    return report
