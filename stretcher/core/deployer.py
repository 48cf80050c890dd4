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
# THE DEPLOYER - MANIFEST EXECUTION
# -----------------------------------------------------------------------------
# Responsibility: Run the Deploy pipeline of a manifest, then exactly one of
# its notification hooks with the run transcript on stdin.
#
#   IDLE -> DEPLOYING -> SUCCESS_HOOK -> DONE_OK
#                     -> FAILURE_HOOK -> DONE_ERROR
#
# Contract:
# - Deploy steps run strictly in order; the first failure aborts the rest.
#   No rollback.
# - Hooks are best-effort. A broken notification channel is logged and never
#   changes the outcome: success stays success, and on failure the original
#   DeployError is what the run reports.
# - An empty hook pipeline is still a (no-op) invocation.
# -----------------------------------------------------------------------------

from collections.abc import Sequence
from enum import Enum
from typing import Protocol

from stretcher.core.fetcher import ContentFetcher
from stretcher.core.sync import ArchiveSync
from stretcher.domain.errors import DeployError
from stretcher.domain.models import Manifest
from stretcher.infra.log_sink import LogSink
from stretcher.infra.shell import CommandRunner


class DeployStep(Protocol):
    """One unit of the Deploy pipeline. run() raises DeployError on failure."""

    name: str

    def run(self) -> None:
        ...


class CommandStep:
    """A manifest shell command used as a deploy step."""

    def __init__(self, command: str, runner: CommandRunner, name: str = "command") -> None:
        self.command = command
        self.name = name
        self._runner = runner

    def run(self) -> None:
        status = self._runner.run(self.command)
        if status != 0:
            raise DeployError(
                f"command failed: {self.command}: exit status {status}", step=self.name
            )

    def __repr__(self) -> str:
        return f"CommandStep({self.name}: {self.command!r})"


def build_deploy_steps(
    manifest: Manifest, fetcher: ContentFetcher, runner: CommandRunner, sink: LogSink
) -> list[DeployStep]:
    """The Deploy pipeline: pre commands, archive sync (if src), post commands."""
    steps: list[DeployStep] = [CommandStep(c, runner, "pre") for c in manifest.commands.pre]
    if manifest.src:
        steps.append(ArchiveSync(manifest, fetcher, runner, sink))
    steps += [CommandStep(c, runner, "post") for c in manifest.commands.post]
    return steps


class DeployState(str, Enum):
    """Lifecycle of one deploy() call."""

    IDLE = "idle"
    DEPLOYING = "deploying"
    SUCCESS_HOOK = "success_hook"
    FAILURE_HOOK = "failure_hook"
    DONE_OK = "done_ok"
    DONE_ERROR = "done_error"


class DeployOrchestrator:
    """
    Executes a manifest and dispatches its success or failure hook.

    The hook receives the LogSink content as captured right before the
    hook starts.
    """

    def __init__(self, sink: LogSink, runner: CommandRunner) -> None:
        self._sink = sink
        self._runner = runner
        self.state = DeployState.IDLE

    def _run_steps(self, steps: Sequence[DeployStep]) -> DeployError | None:
        """Run steps in order. Returns the error of the first failing step."""
        for index, step in enumerate(steps, start=1):
            self._sink.info("DEPLOYER", f"step {index}/{len(steps)}: {step!r}")
            try:
                step.run()
            except DeployError as e:
                return e
            except Exception as e:
                error = DeployError(f"{step!r} failed: {e}", step=step.name)
                error.__cause__ = e
                return error
        return None

    def _invoke_hook(self, name: str, commands: Sequence[str]) -> None:
        transcript = self._sink.getvalue()
        try:
            self._runner.invoke_pipe(commands, transcript)
        except Exception as e:
            self._sink.warning("DEPLOYER", f"{name} hook failed: {e}")

    def deploy(self, manifest: Manifest, steps: Sequence[DeployStep]) -> None:
        """
        Run the Deploy pipeline, then the matching hook.

        Args:
            manifest: Source of the success/failure hook pipelines.
            steps: The Deploy pipeline (see build_deploy_steps).

        Raises:
            DeployError: A deploy step failed. Raised after the failure hook.
        """
        self.state = DeployState.DEPLOYING
        error = self._run_steps(steps)

        if error is not None:
            self._sink.error("DEPLOYER", f"Deploy manifest failed: {error}")
            self.state = DeployState.FAILURE_HOOK
            self._invoke_hook("failure", manifest.commands.failure)
            self.state = DeployState.DONE_ERROR
            raise DeployError(f"Deploy manifest failed: {error}", step=error.step) from error

        self._sink.success("DEPLOYER", "Deploy manifest succeeded.")
        self.state = DeployState.SUCCESS_HOOK
        self._invoke_hook("success", manifest.commands.success)
        self.state = DeployState.DONE_OK
