# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# MANIFEST CODEC
# -----------------------------------------------------------------------------
# Manifests are YAML documents validated into the Manifest model:
#
#   src: s3://example.com/app/app-v42.tar.gz
#   checksum: e0840daaa97cd2cf2175f9e5d133ffb3324a2b93
#   dest: /home/example/app
#   excludes: ["*.pyc", ".git"]
#   commands:
#     pre:  [echo deploy start]
#     post: [echo deploy done]
#     success: [cat > /tmp/success.log]
#     failure: [cat > /tmp/failure.log]
#
# A document is either valid or rejected; there is no best-effort
# partial manifest. Unknown keys are ignored with a warning.
# -----------------------------------------------------------------------------

import yaml
from pydantic import ValidationError

from stretcher.domain.errors import ManifestParseError
from stretcher.domain.models import Commands, Manifest
from stretcher.infra.log_sink import LogSink


def unknown_keys(doc: dict) -> list[str]:
    """Keys of a manifest document that the Manifest model does not know."""
    unknown = [str(k) for k in doc if k not in Manifest.model_fields]
    commands = doc.get("commands")
    if isinstance(commands, dict):
        unknown += [f"commands.{k}" for k in commands if k not in Commands.model_fields]
    return unknown


def decode_manifest(data: bytes, sink: LogSink | None = None) -> Manifest:
    """
    Parse manifest bytes.

    Unknown keys are ignored so manifests written for newer agents still
    deploy; each one is logged as a warning when a sink is given.

    Raises:
        ManifestParseError: YAML syntax error, non-mapping document, or a
            field that fails validation.
    """
    try:
        doc = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ManifestParseError(f"invalid manifest YAML: {e}", cause=str(e)) from e

    if not isinstance(doc, dict):
        kind = "empty document" if doc is None else type(doc).__name__
        raise ManifestParseError(f"manifest must be a mapping, got {kind}", cause=kind)

    try:
        manifest = Manifest.model_validate(doc)
    except ValidationError as e:
        raise ManifestParseError(f"invalid manifest: {e}", cause=str(e)) from e

    if sink is not None:
        for key in unknown_keys(doc):
            sink.warning("MANIFEST", f"ignoring unknown key: {key}")
    return manifest


def encode_manifest(manifest: Manifest) -> str:
    """Serialize a manifest back to YAML, keeping field and command order."""
    return yaml.safe_dump(
        manifest.model_dump(exclude_none=True), sort_keys=False, default_flow_style=False
    )
