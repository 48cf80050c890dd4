"""
Tests for domain models: content locations and the Manifest.
"""

import pytest
from pydantic import ValidationError

from stretcher.domain.errors import ConfigError
from stretcher.domain.models import Commands, ContentLocation, ContentScheme, Manifest


class TestContentLocation:
    """Tests for URL parsing and scheme pinning."""

    @pytest.mark.parametrize(
        "uri,scheme",
        [
            ("s3://bucket/path/manifest.yml", ContentScheme.S3),
            ("http://example.com/manifest.yml", ContentScheme.HTTP),
            ("https://example.com/manifest.yml", ContentScheme.HTTPS),
            ("file:///srv/manifest.yml", ContentScheme.FILE),
        ],
    )
    def test_recognized_schemes(self, uri, scheme):
        """Each of the four schemes maps to its enum member."""
        assert ContentLocation.parse(uri).scheme is scheme

    def test_s3_host_and_path(self):
        """Bucket is the host, key is the path."""
        location = ContentLocation.parse("s3://my-bucket/app/manifest.yml")
        assert location.host == "my-bucket"
        assert location.path == "/app/manifest.yml"

    def test_file_path(self):
        """file:/// URLs keep the absolute path."""
        location = ContentLocation.parse("file:///etc/stretcher/manifest.yml")
        assert location.path == "/etc/stretcher/manifest.yml"
        assert location.host == ""

    def test_scheme_is_case_insensitive(self):
        """Upper-case schemes are accepted."""
        assert ContentLocation.parse("HTTPS://example.com/m.yml").scheme is ContentScheme.HTTPS

    def test_escaped_path_is_decoded(self):
        """Percent escapes in file paths are decoded for local lookup."""
        location = ContentLocation.parse("file:///srv/my%20manifest%2Bv2.yml")
        assert location.path == "/srv/my manifest+v2.yml"
        assert location.uri == "file:///srv/my%20manifest%2Bv2.yml"

    def test_escaped_s3_key_is_decoded(self):
        """Percent escapes in object keys are decoded."""
        location = ContentLocation.parse("s3://my-bucket/app%20v1/manifest.yml")
        assert location.host == "my-bucket"
        assert location.path == "/app v1/manifest.yml"

    def test_query_and_fragment_not_in_path(self):
        """Query strings and fragments never leak into the path."""
        location = ContentLocation.parse("https://example.com/m.yml?version=42#top")
        assert location.path == "/m.yml"
        assert location.uri == "https://example.com/m.yml?version=42#top"

    @pytest.mark.parametrize("uri", ["ftp://example.com/m.yml", "gs://bucket/m.yml", "/no/scheme"])
    def test_unknown_scheme_rejected(self, uri):
        """Unknown schemes raise ConfigError naming the URL."""
        with pytest.raises(ConfigError) as exc_info:
            ContentLocation.parse(uri)
        assert uri in str(exc_info.value)


class TestManifest:
    """Tests for Manifest validation."""

    def test_minimal_manifest(self):
        """A manifest with no fields is a no-op deployment."""
        manifest = Manifest()
        assert manifest.src is None
        assert manifest.commands == Commands()

    def test_commands_keep_order(self):
        """Pipelines keep their declared order."""
        manifest = Manifest(commands={"pre": ["a", "b", "c"], "failure": ["z", "y"]})
        assert manifest.commands.pre == ["a", "b", "c"]
        assert manifest.commands.failure == ["z", "y"]

    def test_src_requires_dest(self):
        """src without dest is rejected."""
        with pytest.raises(ValidationError):
            Manifest(src="s3://bucket/app.tgz")

    def test_checksum_must_be_hex(self):
        """Non-hex checksums are rejected."""
        with pytest.raises(ValidationError):
            Manifest(src="file:///a.tgz", dest="/tmp/a", checksum="not-hex!")

    def test_unknown_field_ignored(self):
        """Keys from newer manifest versions do not reject the manifest."""
        manifest = Manifest(dest="/tmp/app", sync_strategy="mv")
        assert manifest.dest == "/tmp/app"
        assert not hasattr(manifest, "sync_strategy")

    def test_unknown_command_pipeline_ignored(self):
        """Pipelines other than pre/post/success/failure are dropped."""
        commands = Commands(deploy=["echo"], post=["echo post"])
        assert commands.post == ["echo post"]
        assert "deploy" not in commands.model_dump()

    def test_manifest_is_immutable(self):
        """Decoded manifests cannot be modified."""
        manifest = Manifest(dest="/tmp/app")
        with pytest.raises(ValidationError):
            manifest.dest = "/elsewhere"
