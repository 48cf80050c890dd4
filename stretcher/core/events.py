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
# EVENT SOURCES - TRIGGER EXTRACTION
# -----------------------------------------------------------------------------
# Responsibility: Read the one deploy request of this run from stdin.
#
# Two upstream encodings exist:
# - Serf user event: the payload is the first raw line of stdin.
# - Consul watch (type=event): stdin is a JSON array of event records with
#   base64 payloads. The record with the highest LTime wins; ties go to the
#   later record, so a batch resolves to its most recent event.
#
# Which source to use is decided by the caller (see event_source_for);
# sources never look at the environment themselves.
# -----------------------------------------------------------------------------

import base64
import binascii
import json
from abc import ABC, abstractmethod
from typing import BinaryIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from stretcher.config import AgentSettings
from stretcher.domain.errors import NoEventError, ParseError
from stretcher.domain.models import DeployEvent
from stretcher.infra.log_sink import LogSink


class ConsulEvent(BaseModel):
    """One record of a Consul event watch."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(default="", alias="ID")
    name: str = Field(default="", alias="Name")
    payload: str | None = Field(default=None, alias="Payload")
    node_filter: str = Field(default="", alias="NodeFilter")
    service_filter: str = Field(default="", alias="ServiceFilter")
    tag_filter: str = Field(default="", alias="TagFilter")
    version: int = Field(default=0, alias="Version")
    ltime: int = Field(default=0, alias="LTime")

    def payload_string(self) -> str:
        """Decode the base64 payload. A null payload is the empty string."""
        if not self.payload:
            return ""
        return base64.b64decode(self.payload, validate=True).decode("utf-8")


def parse_consul_events(data: bytes) -> list[ConsulEvent]:
    """
    Parse a Consul watch document into event records.

    Whitespace-only input is an empty batch.

    Raises:
        ParseError: Invalid JSON, a non-array document or a malformed record.
    """
    if not data.strip():
        return []
    try:
        doc = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"invalid consul event JSON: {e}") from e
    if not isinstance(doc, list):
        raise ParseError(f"consul events must be a JSON array, got {type(doc).__name__}")
    try:
        return [ConsulEvent.model_validate(record) for record in doc]
    except ValidationError as e:
        raise ParseError(f"malformed consul event: {e}") from e


def latest_event(events: list[ConsulEvent]) -> ConsulEvent | None:
    """The event with the highest LTime; the later one on ties."""
    latest = None
    for event in events:
        if latest is None or event.ltime >= latest.ltime:
            latest = event
    return latest


class EventSource(ABC):
    """Produces exactly one DeployEvent from an input stream."""

    name = "event"

    def __init__(self, sink: LogSink) -> None:
        self._sink = sink

    @abstractmethod
    def extract(self, stream: BinaryIO) -> DeployEvent:
        """Block until the event is available and return it."""
        ...


class RawLineSource(EventSource):
    """Serf user event: the first line of stdin, verbatim."""

    name = "serf"

    def __init__(self, sink: LogSink, event_name: str = "") -> None:
        super().__init__(sink)
        self._event_name = event_name

    def extract(self, stream: BinaryIO) -> DeployEvent:
        self._sink.info("EVENTS", f"Reading Serf user event: {self._event_name}")
        try:
            line = stream.readline()
        except OSError as e:
            raise NoEventError(f"reading stdin failed: {e}") from e
        if not line:
            raise NoEventError("no event line on stdin")
        try:
            payload = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise NoEventError(f"event line is not UTF-8: {e}") from e
        if payload.endswith("\n"):
            payload = payload[:-1]
            if payload.endswith("\r"):
                payload = payload[:-1]
        return DeployEvent(payload=payload, source=self.name)


class ConsulEventSource(EventSource):
    """Consul event watch: a JSON array of records on stdin."""

    name = "consul"

    def extract(self, stream: BinaryIO) -> DeployEvent:
        self._sink.info("EVENTS", "Reading Consul event")
        try:
            data = stream.read()
        except OSError as e:
            raise ParseError(f"reading stdin failed: {e}") from e

        event = latest_event(parse_consul_events(data))
        if event is None:
            raise NoEventError("no events found")

        try:
            payload = event.payload_string()
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ParseError(f"invalid payload in consul event {event.id}: {e}") from e
        self._sink.info("EVENTS", f"Consul event {event.name} (ltime {event.ltime})")
        return DeployEvent(payload=payload, source=self.name)


def event_source_for(settings: AgentSettings, sink: LogSink) -> EventSource:
    """Pick the event source from startup settings."""
    if settings.serf_user_event:
        return RawLineSource(sink, settings.serf_user_event)
    return ConsulEventSource(sink)
