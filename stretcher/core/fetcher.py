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
# THE FETCHER - CONTENT RESOLUTION
# -----------------------------------------------------------------------------
# Responsibility: Turn a content URL into a readable byte stream, whatever
# the storage backend. Used for the manifest itself and for archives.
#
# Dispatch is a closed mapping ContentScheme -> backend. Unknown schemes are
# rejected when the URL is parsed, never tried as a fallback transport.
#
# Fetch is dumb, decode is smart: HTTP status codes are not used to fail,
# the body is handed to the caller as-is. No retries, no timeouts.
# -----------------------------------------------------------------------------

from collections.abc import Callable
from typing import Any, BinaryIO, Protocol

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError
from urllib3.exceptions import HTTPError as TransportError

from stretcher.config import AwsAuth
from stretcher.domain.errors import ConfigError, FetchError
from stretcher.domain.models import ContentLocation, ContentScheme
from stretcher.infra.log_sink import LogSink

# Errors a returned stream may raise while being read
READ_ERRORS = (OSError, BotoCoreError, TransportError)


class Backend(Protocol):
    """A storage backend able to open one kind of content location."""

    def open(self, location: ContentLocation) -> BinaryIO:
        ...


def default_s3_client(auth: AwsAuth) -> Any:
    """Build a boto3 S3 client from static credentials."""
    return boto3.client(
        "s3",
        aws_access_key_id=auth.access_key,
        aws_secret_access_key=auth.secret_key,
        region_name=auth.region,
    )


class FileBackend:
    """file:///absolute/path"""

    def open(self, location: ContentLocation) -> BinaryIO:
        try:
            return open(location.path, "rb")
        except OSError as e:
            raise FetchError(f"cannot open {location.path}: {e}", uri=location.uri) from e


class HttpBackend:
    """http:// and https:// via a plain GET on the literal URL."""

    def __init__(
        self, sink: LogSink, http_get: Callable[..., requests.Response] = requests.get
    ) -> None:
        self._sink = sink
        self._get = http_get

    def open(self, location: ContentLocation) -> BinaryIO:
        try:
            response = self._get(location.uri, stream=True)
        except requests.RequestException as e:
            raise FetchError(f"GET {location.uri} failed: {e}", uri=location.uri) from e

        if response.status_code >= 400:
            # Body is still passed through; the decoder decides
            self._sink.warning(
                "FETCHER", f"GET {location.uri} returned HTTP {response.status_code}"
            )

        response.raw.decode_content = True
        return response.raw


class S3Backend:
    """
    s3://bucket/key

    Needs static credentials and a region from AWS_CONFIG_FILE. Both are
    checked before a client is built, so a misconfigured agent fails fast
    without touching the network.
    """

    def __init__(
        self, auth: AwsAuth, client_factory: Callable[[AwsAuth], Any] = default_s3_client
    ) -> None:
        self._auth = auth
        self._client_factory = client_factory

    def open(self, location: ContentLocation) -> BinaryIO:
        if not self._auth.is_usable():
            raise ConfigError("Invalid AWS Auth or Region. Please check env AWS_CONFIG_FILE.")

        key = location.path.lstrip("/")
        client = self._client_factory(self._auth)
        try:
            response = client.get_object(Bucket=location.host, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise FetchError(f"GET {location.uri} failed: {e}", uri=location.uri) from e
        return response["Body"]


class ContentFetcher:
    """
    Scheme-polymorphic content fetcher.

    Each recognized scheme maps to exactly one backend; http and https
    share the HTTP backend.
    """

    def __init__(
        self,
        sink: LogSink,
        auth: AwsAuth | None = None,
        s3_client_factory: Callable[[AwsAuth], Any] = default_s3_client,
        http_get: Callable[..., requests.Response] = requests.get,
    ) -> None:
        self._sink = sink
        http = HttpBackend(sink, http_get)
        self._backends: dict[ContentScheme, Backend] = {
            ContentScheme.S3: S3Backend(auth or AwsAuth(), s3_client_factory),
            ContentScheme.HTTP: http,
            ContentScheme.HTTPS: http,
            ContentScheme.FILE: FileBackend(),
        }

    def backend_for(self, scheme: ContentScheme) -> Backend:
        return self._backends[scheme]

    def fetch(self, uri: str) -> BinaryIO:
        """
        Open the content at `uri` for reading.

        Raises:
            ConfigError: Unknown scheme, or S3 without credentials/region.
            FetchError: The backend could not retrieve the content.
        """
        self._sink.info("FETCHER", f"loading URL {uri}")
        location = ContentLocation.parse(uri)
        return self.backend_for(location.scheme).open(location)
