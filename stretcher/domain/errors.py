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
# ERROR TAXONOMY
# -----------------------------------------------------------------------------
# Every failure of a run surfaces as exactly one of these. All are fatal for
# the run; nothing in the agent retries. The lower-level cause is chained
# (raise ... from exc) and its description is embedded in the message.
# -----------------------------------------------------------------------------


class StretcherError(Exception):
    """Base class for every terminal error of a run."""

    pass


class ConfigError(StretcherError):
    """Bad or missing credentials/region, or an unrecognized URL scheme."""

    pass


class NoEventError(StretcherError):
    """No trigger payload could be read from standard input."""

    pass


class ParseError(StretcherError):
    """Structured input (event stream) is malformed."""

    pass


class ManifestParseError(ParseError):
    """
    The fetched manifest document is malformed.

    Carries the decoder's own description so the operator sees which
    field or line was rejected.
    """

    def __init__(self, message: str, cause: str = "") -> None:
        super().__init__(message)
        self.cause = cause


class FetchError(StretcherError):
    """I/O or network failure while retrieving content bytes."""

    def __init__(self, message: str, uri: str = "") -> None:
        super().__init__(message)
        self.uri = uri


class DeployError(StretcherError):
    """A deploy step failed. Raised after the failure hooks have run."""

    def __init__(self, message: str, step: str = "") -> None:
        super().__init__(message)
        self.step = step
