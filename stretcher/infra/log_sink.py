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
# LOG SINK - CONSOLE + RUN TRANSCRIPT
# -----------------------------------------------------------------------------
# Responsibility: Every line the agent logs goes to the live console (stderr)
# and is kept in an in-memory transcript. At the end of a run the transcript
# is piped into the success/failure hooks, so it must hold everything.
#
# The transcript is rich's own record buffer (Console(record=True)). It is
# append-only and never cleared during a run. Writes hold a lock so a
# parallel step runner would still see every line at hook time.
#
# Both outputs carry the rendered text, not the raw bytes commands wrote:
# tabs are expanded to spaces and control characters are dropped. Hooks get
# exactly what the operator saw on the console.
# -----------------------------------------------------------------------------

import threading
from datetime import datetime
from typing import IO

from rich.console import Console
from rich.text import Text

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


class LogSink:
    """
    Append-only log stream shared by all components of a run.

    Created once per process and passed to each component; there is no
    module-level console.
    """

    def __init__(self, file: IO[str] | None = None) -> None:
        """
        Args:
            file: Live output stream. Defaults to stderr.
        """
        self._lock = threading.Lock()
        self._console = Console(
            file=file,
            stderr=file is None,
            record=True,
            soft_wrap=True,
            highlight=False,
            emoji=False,
        )

    @property
    def console(self) -> Console:
        return self._console

    def _emit(self, line: str, style: str | None) -> None:
        with self._lock:
            self._console.print(Text(line, style=style or ""))

    def log(self, tag: str, message: str, style: str | None = None) -> None:
        """Log one timestamped, tagged line."""
        stamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        self._emit(f"{stamp} [{tag}] {message}", style)

    def info(self, tag: str, message: str) -> None:
        self.log(tag, message, "cyan")

    def success(self, tag: str, message: str) -> None:
        self.log(tag, message, "green")

    def warning(self, tag: str, message: str) -> None:
        self.log(tag, message, "yellow")

    def error(self, tag: str, message: str) -> None:
        self.log(tag, message, "red")

    def raw(self, line: str) -> None:
        """Log a line verbatim (command output)."""
        self._emit(line.rstrip("\r\n"), "dim")

    def getvalue(self) -> bytes:
        """Everything logged so far, as plain UTF-8 text."""
        with self._lock:
            return self._console.export_text(clear=False).encode("utf-8")
