"""Persistent content fingerprints used to skip unchanged documents."""

import hashlib
import json
import os
import re
import tempfile
from pathlib import Path

from wpsync.utils import content_hash, get_logger

FORMAT_VERSION = 1
LEGACY_FILE_NAME = "wphandbook-hash.txt"
MD5_HEX_LENGTH = 32

_HEX_DIGEST_RE = re.compile(r"^[0-9a-f]{32,128}$")


class FingerprintStoreError(Exception):
    """Exception raised when the fingerprint file is corrupt."""
    pass


class FingerprintStore:
    """Mapping of source URL to the hash of its last published content.

    Stored as JSON:

        {"version": 1, "fingerprints": {"https://.../index.md": "<hex digest>"}}

    Files in the older one-record-per-line format (``url,hash``, MD5 digests)
    are read too and rewritten as JSON on the next save.
    """

    def __init__(self, path: Path | str, fingerprints: dict[str, str] | None = None):
        self.path = Path(path)
        self._fingerprints: dict[str, str] = dict(fingerprints or {})

    @classmethod
    def load(cls, path: Path | str, legacy_path: Path | str | None = None) -> "FingerprintStore":
        """Load a store, starting empty when the file doesn't exist.

        When ``path`` is missing but ``legacy_path`` exists, the legacy file
        is imported instead. The store still saves to ``path``, so the first
        save migrates it to JSON and leaves the legacy file untouched.

        Raises:
            FingerprintStoreError: If the file exists but cannot be parsed.
        """
        path = Path(path)
        source = path
        if not path.exists():
            if legacy_path is None or not Path(legacy_path).exists():
                get_logger().debug(f"No fingerprint file at {path}, starting empty")
                return cls(path)
            source = Path(legacy_path)
            get_logger().info(f"Importing fingerprints from {source}")

        text = source.read_text(encoding="utf-8")
        if text.lstrip().startswith("{"):
            fingerprints = _parse_json(text, source)
        else:
            fingerprints = _parse_lines(text, source)

        return cls(path, fingerprints)

    def get(self, source_url: str) -> str | None:
        return self._fingerprints.get(source_url)

    def matches(self, source_url: str, data: bytes) -> bool:
        """True when data is what was last published for this source.

        Records imported from the line format hold MD5 digests. A match
        against one of those upgrades it to the current hash in place, so
        an unchanged document is not republished after migrating.
        """
        stored = self._fingerprints.get(source_url)
        if stored is None:
            return False

        digest = content_hash(data)
        if stored == digest:
            return True

        if len(stored) == MD5_HEX_LENGTH and stored == hashlib.md5(data).hexdigest():
            self._fingerprints[source_url] = digest
            return True
        return False

    def update(self, source_url: str, digest: str) -> None:
        self._fingerprints[source_url] = digest

    def as_dict(self) -> dict[str, str]:
        return dict(self._fingerprints)

    def __len__(self) -> int:
        return len(self._fingerprints)

    def __contains__(self, source_url: str) -> bool:
        return source_url in self._fingerprints

    def save(self) -> None:
        """Atomically rewrite the whole file.

        Writes to a temporary file beside the target and renames it over
        the original, so readers never see a half-written store.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = {"version": FORMAT_VERSION, "fingerprints": self._fingerprints}

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        get_logger().debug(f"Saved {len(self._fingerprints)} fingerprint(s) to {self.path}")


def _validate_record(source_url, digest, where: str) -> None:
    if not isinstance(source_url, str) or not source_url:
        raise FingerprintStoreError(f"{where}: source URL must be a non-empty string")
    if not isinstance(digest, str) or not _HEX_DIGEST_RE.match(digest):
        raise FingerprintStoreError(f"{where}: invalid hash {digest!r} for {source_url}")


def _parse_json(text: str, path: Path) -> dict[str, str]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise FingerprintStoreError(f"Fingerprint file {path} is not valid JSON: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("fingerprints"), dict):
        raise FingerprintStoreError(f"Fingerprint file {path} has no 'fingerprints' object")

    version = document.get("version")
    if version != FORMAT_VERSION:
        raise FingerprintStoreError(f"Fingerprint file {path} has unsupported version {version!r}")

    fingerprints = document["fingerprints"]
    for source_url, digest in fingerprints.items():
        _validate_record(source_url, digest, str(path))
    return fingerprints


def _parse_lines(text: str, path: Path) -> dict[str, str]:
    """Parse the legacy ``url,hash`` line format."""
    fingerprints = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        if "," not in line:
            raise FingerprintStoreError(f"{path}:{lineno}: malformed record, expected 'url,hash'")
        # Hashes never contain commas, URLs might
        source_url, digest = line.rsplit(",", 1)
        _validate_record(source_url, digest, f"{path}:{lineno}")
        fingerprints[source_url] = digest
    return fingerprints
