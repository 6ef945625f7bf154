"""Tests for config module."""

import json
from pathlib import Path

import pytest

from wpsync.config import SyncConfig, ConfigError, load_config, create_default_config

BASE = {
    "source_url": "https://example.com/manifest.json",
    "wordpress_domain": "https://wp.example.com",
    "username": "editor",
    "apikey": "app-pass",
}


class TestSyncConfig:
    """Tests for SyncConfig dataclass."""

    def test_basic_config(self):
        """Test creating a config with only required fields."""
        config = SyncConfig(**BASE)

        assert config.source_url == "https://example.com/manifest.json"
        assert config.collection == "pages"
        assert config.timeout == 30
        assert config.post_status is None
        assert config.hash_file == Path("wphandbook-hash.json")

    def test_domain_trailing_slash_removed(self):
        """Test that trailing slashes are removed from wordpress_domain."""
        config = SyncConfig(**{**BASE, "wordpress_domain": "https://wp.example.com/"})
        assert config.wordpress_domain == "https://wp.example.com"

    def test_hash_file_string_to_path(self):
        """Test that hash_file is converted to Path."""
        config = SyncConfig(**BASE, hash_file="state/hashes.json")
        assert config.hash_file == Path("state/hashes.json")

    def test_default_markdown_options(self):
        """Test markdown defaults are applied."""
        config = SyncConfig(**BASE, markdown={"footnotes": True})

        assert config.markdown["tables"] is True
        assert config.markdown["footnotes"] is True
        assert config.markdown["tasklists"] is False

    @pytest.mark.parametrize("name", ["source_url", "wordpress_domain", "username", "apikey"])
    def test_empty_required_field(self, name):
        """Test each required field must be non-empty."""
        with pytest.raises(ConfigError, match=name):
            SyncConfig(**{**BASE, name: ""})

    def test_invalid_timeout(self):
        """Test timeout must be positive."""
        with pytest.raises(ConfigError, match="timeout"):
            SyncConfig(**BASE, timeout=0)

    @pytest.mark.parametrize("name, value", [
        ("collection", 5),
        ("collection", None),
        ("collection", "/"),
        ("hash_file", None),
        ("hash_file", ""),
        ("hash_file", 12),
        ("user_agent", None),
        ("post_status", 1),
        ("raw_github_urls", "false"),
    ])
    def test_wrong_optional_type(self, name, value):
        """Test optional parameters of the wrong type are configuration errors."""
        with pytest.raises(ConfigError, match=name):
            SyncConfig(**BASE, **{name: value})


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_json_config(self, tmp_path):
        """Test loading a JSON config file."""
        config_file = tmp_path / "wphandbook.json"
        config_file.write_text(json.dumps({**BASE, "post_status": "publish"}))

        config = load_config(config_file)

        assert config.username == "editor"
        assert config.apikey == "app-pass"
        assert config.post_status == "publish"

    def test_load_yaml_config(self, tmp_path):
        """Test loading a YAML config file."""
        config_file = tmp_path / "wpsync.yaml"
        config_file.write_text("""
source_url: https://example.com/manifest.json
wordpress_domain: https://wp.example.com
username: editor
apikey: app-pass
collection: docs
""")

        config = load_config(config_file)

        assert config.collection == "docs"

    def test_load_from_string_path(self, tmp_path):
        """Test load_config accepts a string path."""
        config_file = tmp_path / "wphandbook.json"
        config_file.write_text(json.dumps(BASE))

        config = load_config(str(config_file))

        assert config.wordpress_domain == "https://wp.example.com"

    def test_missing_file(self, tmp_path):
        """Test missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_missing_required_fields(self, tmp_path):
        """Test missing parameters are all named in the error."""
        config_file = tmp_path / "wphandbook.json"
        config_file.write_text(json.dumps({"source_url": "https://example.com/m.json"}))

        with pytest.raises(ConfigError) as excinfo:
            load_config(config_file)

        message = str(excinfo.value)
        assert "wordpress_domain" in message
        assert "username" in message
        assert "apikey" in message

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON raises ConfigError."""
        config_file = tmp_path / "wphandbook.json"
        config_file.write_text("{not json")

        with pytest.raises(ConfigError, match="decoding"):
            load_config(config_file)

    def test_not_an_object(self, tmp_path):
        """Test a JSON list is rejected."""
        config_file = tmp_path / "wphandbook.json"
        config_file.write_text("[1, 2]")

        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_unknown_parameter(self, tmp_path):
        """Test unknown parameters are rejected."""
        config_file = tmp_path / "wphandbook.json"
        config_file.write_text(json.dumps({**BASE, "pasword": "x"}))

        with pytest.raises(ConfigError, match="pasword"):
            load_config(config_file)

    @pytest.mark.parametrize("name, value", [
        ("collection", 5),
        ("collection", None),
        ("hash_file", None),
        ("raw_github_urls", "no"),
    ])
    def test_wrong_optional_type_in_file(self, tmp_path, name, value):
        """Test a badly typed value in the file is a ConfigError, not a crash."""
        config_file = tmp_path / "wphandbook.json"
        config_file.write_text(json.dumps({**BASE, name: value}))

        with pytest.raises(ConfigError, match=name):
            load_config(config_file)


class TestCreateDefaultConfig:
    """Tests for create_default_config function."""

    def test_is_valid_json(self):
        """Test the template parses and carries the given URLs."""
        content = create_default_config("https://wp.example.com", "https://example.com/m.json")
        data = json.loads(content)

        assert data["wordpress_domain"] == "https://wp.example.com"
        assert data["source_url"] == "https://example.com/m.json"
        assert data["username"]
        assert data["apikey"]

    def test_template_loads(self, tmp_path):
        """Test the template is accepted by load_config."""
        config_file = tmp_path / "wphandbook.json"
        config_file.write_text(create_default_config("https://wp.example.com", "https://example.com/m.json"))

        config = load_config(config_file)

        assert config.collection == "pages"
        assert config.raw_github_urls is True
