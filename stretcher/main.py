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
# STRETCHER - COMMAND LINE ENTRY POINT
# -----------------------------------------------------------------------------
# Meant to be the event handler of a Consul watch or a Serf agent:
#
#   consul watch -type event -name deploy stretcher
#   serf agent -event-handler "user:deploy=stretcher"
#
# Exit status 0 when the manifest deployed, 1 on any terminal error.
# -----------------------------------------------------------------------------

import argparse
import sys

from dotenv import load_dotenv
from rich.markup import escape
from rich.panel import Panel

from stretcher import __version__
from stretcher.config import AgentSettings, AwsAuth, load_aws_config
from stretcher.core.agent import Agent
from stretcher.core.deployer import DeployOrchestrator
from stretcher.core.events import event_source_for
from stretcher.core.fetcher import ContentFetcher
from stretcher.domain.errors import StretcherError
from stretcher.infra.log_sink import LogSink
from stretcher.infra.shell import CommandRunner


def build_agent(settings: AgentSettings, sink: LogSink) -> Agent:
    """Construct every component of a run from startup settings."""
    auth = AwsAuth()
    if settings.aws_config_file:
        auth = load_aws_config(settings.aws_config_file, settings.aws_profile)

    runner = CommandRunner(sink)
    return Agent(
        sink=sink,
        event_source=event_source_for(settings, sink),
        fetcher=ContentFetcher(sink, auth),
        runner=runner,
        orchestrator=DeployOrchestrator(sink, runner),
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="stretcher",
        description="Deploy agent for Consul/Serf events. Reads the event from STDIN.",
    )
    parser.add_argument("-v", "--version", action="store_true", help="print version and exit")
    args = parser.parse_args(argv)

    if args.version:
        print(f"stretcher version: {__version__}")
        return 0

    load_dotenv()
    sink = LogSink()

    try:
        agent = build_agent(AgentSettings.from_env(), sink)
        agent.run(sys.stdin.buffer)
    except StretcherError as e:
        sink.console.print(
            Panel(f"[bold red]{type(e).__name__}[/bold red]\n\n{escape(str(e))}", title="DEPLOY HALT",
                  border_style="red")
        )
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
