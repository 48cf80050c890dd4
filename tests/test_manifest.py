"""
Tests for the YAML manifest codec.
"""

import pytest

from stretcher.core.manifest import decode_manifest, encode_manifest, unknown_keys
from stretcher.domain.errors import ManifestParseError, ParseError


class TestDecodeManifest:
    """Tests for decode_manifest."""

    def test_full_manifest(self, manifest_yaml):
        """Every field of a complete document is decoded."""
        manifest = decode_manifest(manifest_yaml)
        assert manifest.src == "s3://example-bucket/app/app-v42.tar.gz"
        assert manifest.checksum == "e0840daaa97cd2cf2175f9e5d133ffb3324a2b93"
        assert manifest.dest == "/home/example/app"
        assert manifest.excludes == ["*.pyc", ".git"]
        assert manifest.commands.pre == ["echo deploy start", "make prepare"]
        assert manifest.commands.post == ["echo deploy done"]
        assert manifest.commands.success == ["cat > /tmp/success.log"]
        assert manifest.commands.failure == ["cat > /tmp/failure.log", "notify-team"]

    def test_commands_only(self):
        """A manifest without src is valid."""
        manifest = decode_manifest(b"commands:\n  post:\n    - systemctl restart app\n")
        assert manifest.src is None
        assert manifest.commands.post == ["systemctl restart app"]
        assert manifest.commands.success == []

    def test_invalid_yaml(self):
        """YAML syntax errors are ManifestParseError with the cause."""
        with pytest.raises(ManifestParseError) as exc_info:
            decode_manifest(b"commands: [unclosed\n")
        assert exc_info.value.cause
        assert isinstance(exc_info.value, ParseError)

    @pytest.mark.parametrize("data", [b"", b"- just\n- a list\n", b"plain string\n"])
    def test_non_mapping_document(self, data):
        """Empty or non-mapping documents are rejected."""
        with pytest.raises(ManifestParseError):
            decode_manifest(data)

    def test_missing_dest(self):
        """src without dest is rejected, not half-decoded."""
        with pytest.raises(ManifestParseError) as exc_info:
            decode_manifest(b"src: s3://bucket/app.tgz\n")
        assert "dest" in str(exc_info.value)

    def test_malformed_step(self):
        """A pipeline step that is not a string is rejected."""
        with pytest.raises(ManifestParseError):
            decode_manifest(b"commands:\n  pre:\n    - {run: make}\n")

    def test_pipeline_must_be_list(self):
        """A pipeline given as a scalar is rejected."""
        with pytest.raises(ManifestParseError):
            decode_manifest(b"commands:\n  success: echo ok\n")


class TestEncodeManifest:
    """Tests for encode_manifest."""

    def test_round_trip(self, manifest_yaml):
        """decode(encode(m)) reproduces the same manifest."""
        manifest = decode_manifest(manifest_yaml)
        assert decode_manifest(encode_manifest(manifest).encode()) == manifest

    def test_round_trip_keeps_pipeline_order(self):
        """All pipelines keep their step order through a round trip."""
        doc = (
            b"commands:\n"
            b"  pre: [c, a, b]\n"
            b"  post: [z, y]\n"
            b"  success: [s2, s1]\n"
            b"  failure: [f3, f1, f2]\n"
        )
        manifest = decode_manifest(encode_manifest(decode_manifest(doc)).encode())
        assert manifest.commands.pre == ["c", "a", "b"]
        assert manifest.commands.post == ["z", "y"]
        assert manifest.commands.success == ["s2", "s1"]
        assert manifest.commands.failure == ["f3", "f1", "f2"]

    def test_unset_fields_omitted(self):
        """Optional fields that are not set are not written as null."""
        text = encode_manifest(decode_manifest(b"commands: {}\n"))
        assert "null" not in text
        assert "src" not in text


class TestUnknownKeys:
    """Keys the manifest does not know are ignored, with a warning."""

    def test_unknown_keys_listed(self):
        """Top-level and commands.* extras are both reported."""
        doc = {"dest": "/srv", "sync_strategy": "mv", "commands": {"deploy": ["x"], "pre": []}}
        assert unknown_keys(doc) == ["sync_strategy", "commands.deploy"]

    def test_decode_warns_and_keeps_known_fields(self, sink):
        """Unknown keys are dropped; known ones still decode."""
        manifest = decode_manifest(
            b"dest: /srv/app\n"
            b"sync_strategy: mv\n"
            b"commands:\n"
            b"  deploy: [make]\n"
            b"  post: [echo done]\n",
            sink,
        )
        assert manifest.dest == "/srv/app"
        assert manifest.commands.post == ["echo done"]
        text = sink.getvalue().decode()
        assert "[MANIFEST] ignoring unknown key: sync_strategy" in text
        assert "[MANIFEST] ignoring unknown key: commands.deploy" in text

    def test_known_document_logs_nothing(self, sink, manifest_yaml):
        """A clean manifest produces no warnings."""
        decode_manifest(manifest_yaml, sink)
        assert b"MANIFEST" not in sink.getvalue()
