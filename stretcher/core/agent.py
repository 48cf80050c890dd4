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
# THE AGENT - ONE RUN PER EVENT
# -----------------------------------------------------------------------------
# Responsibility: Wire the run together.
#   EventSource -> ContentFetcher -> decode_manifest -> DeployOrchestrator
#
# Every failure surfaces as a single StretcherError carrying the wrapped
# cause in its message. Only the notification hooks are allowed to fail
# quietly (handled inside the orchestrator).
# -----------------------------------------------------------------------------

from contextlib import closing
from typing import BinaryIO

from stretcher.core.deployer import DeployOrchestrator, build_deploy_steps
from stretcher.core.events import EventSource
from stretcher.core.fetcher import READ_ERRORS, ContentFetcher
from stretcher.core.manifest import decode_manifest
from stretcher.domain.errors import (
    ConfigError,
    FetchError,
    ManifestParseError,
    NoEventError,
    ParseError,
)
from stretcher.domain.models import DeployEvent, Manifest
from stretcher.infra.log_sink import LogSink
from stretcher.infra.shell import CommandRunner


class Agent:
    """Runs the full extract -> fetch -> decode -> deploy flow once."""

    def __init__(
        self,
        sink: LogSink,
        event_source: EventSource,
        fetcher: ContentFetcher,
        runner: CommandRunner,
        orchestrator: DeployOrchestrator | None = None,
    ) -> None:
        self._sink = sink
        self._event_source = event_source
        self._fetcher = fetcher
        self._runner = runner
        self._orchestrator = orchestrator or DeployOrchestrator(sink, runner)

    def read_event(self, stdin: BinaryIO) -> DeployEvent:
        self._sink.info("AGENT", "Waiting for events from STDIN...")
        try:
            return self._event_source.extract(stdin)
        except NoEventError as e:
            raise NoEventError(f"Could not parse event: {e}") from e
        except ParseError as e:
            raise ParseError(f"Could not parse event: {e}") from e

    def load_manifest(self, uri: str) -> Manifest:
        """Fetch and decode the manifest at `uri`."""
        try:
            with closing(self._fetcher.fetch(uri)) as stream:
                data = stream.read()
        except ConfigError as e:
            raise ConfigError(f"Load manifest failed: {e}") from e
        except FetchError as e:
            raise FetchError(f"Load manifest failed: {e}", uri=uri) from e
        except READ_ERRORS as e:
            raise FetchError(f"Load manifest failed: {e}", uri=uri) from e

        try:
            return decode_manifest(data, self._sink)
        except ManifestParseError as e:
            raise ManifestParseError(f"Load manifest failed: {e}", cause=e.cause) from e

    def run(self, stdin: BinaryIO) -> None:
        """
        Execute one run.

        Raises:
            StretcherError: The run's single terminal error.
        """
        self._sink.info("AGENT", "Starting up stretcher agent")

        event = self.read_event(stdin)
        self._sink.info("AGENT", f"Loading manifest: {event.payload}")

        manifest = self.load_manifest(event.payload)
        self._sink.info("AGENT", f"Executing manifest {manifest!r}")

        steps = build_deploy_steps(manifest, self._fetcher, self._runner, self._sink)
        self._orchestrator.deploy(manifest, steps)
