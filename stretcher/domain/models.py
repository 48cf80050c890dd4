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
# DOMAIN MODELS - DEPLOY MANIFEST & TRIGGER
# -----------------------------------------------------------------------------
# The Manifest is the deployment unit: an optional archive to sync into a
# destination directory, plus four command pipelines.
#
#   pre -> (archive sync) -> post    : the Deploy pipeline
#   success | failure                : notification hooks, exactly one runs
#
# Manifests are immutable once decoded. Content locations are parsed into a
# closed set of schemes up front, so fetch logic never sees an unknown one.
# -----------------------------------------------------------------------------

from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, ConfigDict, Field, model_validator

from stretcher.domain.errors import ConfigError


class ContentScheme(str, Enum):
    """URL schemes a manifest (or archive) may be fetched from."""

    S3 = "s3"
    HTTP = "http"
    HTTPS = "https"
    FILE = "file"


@dataclass(frozen=True)
class ContentLocation:
    """A parsed, scheme-checked content URL."""

    uri: str
    scheme: ContentScheme
    host: str
    path: str

    @classmethod
    def parse(cls, uri: str) -> "ContentLocation":
        """
        Parse a URL string and pin its scheme.

        Raises:
            ConfigError: If the URL cannot be parsed or its scheme is not
                one of s3, http, https, file.
        """
        try:
            parts = urlsplit(uri)
        except ValueError as e:
            raise ConfigError(f"invalid manifest URL {uri}: {e}") from e

        try:
            scheme = ContentScheme(parts.scheme.lower())
        except ValueError:
            raise ConfigError(
                f"manifest URL scheme must be s3 or http(s) or file: {uri}"
            ) from None

        # Path is percent-decoded for file and s3 lookups; uri stays literal for HTTP
        return cls(uri=uri, scheme=scheme, host=parts.netloc, path=unquote(parts.path))


@dataclass(frozen=True)
class DeployEvent:
    """The single payload string that names what to deploy."""

    payload: str
    source: str


class Commands(BaseModel):
    """Shell command pipelines of a manifest, each run in declared order."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    pre: list[str] = Field(default_factory=list, description="Run before the archive sync")
    post: list[str] = Field(default_factory=list, description="Run after the archive sync")
    success: list[str] = Field(
        default_factory=list, description="Notification hook, receives the run log on stdin"
    )
    failure: list[str] = Field(
        default_factory=list, description="Notification hook, receives the run log on stdin"
    )


class Manifest(BaseModel):
    """
    The deployment unit fetched from the event's content location.

    Fields:
    - src: Archive (tar, optionally compressed) to deploy. Optional; a
      manifest made only of commands is valid.
    - checksum: Hex digest of src. Algorithm is picked from its length.
    - dest: Directory the archive content is synced into. Required with src.
    - excludes: rsync exclude patterns applied during the sync.
    - commands: pre/post/success/failure pipelines.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    src: str | None = Field(default=None, description="Archive URL (s3, http(s) or file)")
    checksum: str | None = Field(
        default=None, pattern=r"^[0-9a-fA-F]+$", description="Hex digest of the archive"
    )
    dest: str | None = Field(default=None, description="Destination directory")
    excludes: list[str] = Field(default_factory=list)
    commands: Commands = Field(default_factory=Commands)

    @model_validator(mode="after")
    def _dest_required_with_src(self) -> "Manifest":
        if self.src and not self.dest:
            raise ValueError("dest is required when src is set")
        return self
