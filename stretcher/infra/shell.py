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
# SHELL RUNNER
# -----------------------------------------------------------------------------
# Responsibility: Run manifest commands through `sh -c`, stream their merged
# stdout/stderr into the LogSink, and optionally feed bytes on stdin.
#
# Used for deploy steps (exit status matters) and for notification hooks
# (invoke_pipe: best-effort, failures are only logged).
# -----------------------------------------------------------------------------

import subprocess
import threading
from collections.abc import Sequence

from stretcher.infra.log_sink import LogSink

DEFAULT_SHELL = "/bin/sh"

# Exit status reported when the shell itself cannot be started
SPAWN_FAILED = 127


class CommandRunner:
    """Runs shell command lines and reports their exit status."""

    def __init__(self, sink: LogSink, shell: str = DEFAULT_SHELL) -> None:
        self._sink = sink
        self._shell = shell

    def _feed_stdin(self, proc: subprocess.Popen, data: bytes) -> None:
        try:
            proc.stdin.write(data)
        except BrokenPipeError:
            # Command exited without reading all of its input
            pass
        finally:
            try:
                proc.stdin.close()
            except BrokenPipeError:
                pass

    def run(self, command: str, stdin: bytes | None = None) -> int:
        """
        Run one command line and wait for it.

        Args:
            command: Shell command line.
            stdin: Bytes written to the command's standard input. When None
                the command gets an empty stdin.

        Returns:
            The exit status (negative for a signal, 127 if the shell could
            not be spawned).
        """
        self._sink.info("SHELL", f"invoking: {command}")
        try:
            proc = subprocess.Popen(
                [self._shell, "-c", command],
                stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            self._sink.error("SHELL", f"cannot start {self._shell}: {e}")
            return SPAWN_FAILED

        feeder = None
        if stdin is not None:
            # Writer thread avoids a pipe deadlock when the command talks
            # before it has consumed its input
            feeder = threading.Thread(
                target=self._feed_stdin, args=(proc, stdin), daemon=True
            )
            feeder.start()

        for line in proc.stdout:
            self._sink.raw(line.decode("utf-8", errors="replace"))
        proc.stdout.close()

        if feeder is not None:
            feeder.join()
        return proc.wait()

    def invoke_pipe(self, commands: Sequence[str], data: bytes) -> None:
        """
        Run each command with `data` on stdin, in order.

        Best-effort: a failing command is logged and the next one still
        runs. Nothing is raised for a non-zero exit.
        """
        for command in commands:
            status = self.run(command, stdin=data)
            if status != 0:
                self._sink.warning("SHELL", f"command failed: {command}: exit status {status}")
