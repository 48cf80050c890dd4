"""
Pytest configuration and fixtures for stretcher tests.
"""

import io
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from stretcher.infra.log_sink import LogSink


class FakeRunner:
    """
    Stand-in for CommandRunner.

    Records every run() and invoke_pipe() call. invoke_pipe also captures
    the LogSink content at call time so tests can compare it with the
    data handed to the hook.
    """

    def __init__(self, sink, failing=(), pipe_error=None):
        self.sink = sink
        self.failing = set(failing)
        self.pipe_error = pipe_error
        self.runs = []
        self.pipes = []

    def run(self, command, stdin=None):
        self.runs.append((command, stdin))
        return 1 if command in self.failing else 0

    def invoke_pipe(self, commands, data):
        self.pipes.append(
            {"commands": list(commands), "data": data, "log_at_call": self.sink.getvalue()}
        )
        if self.pipe_error is not None:
            raise self.pipe_error


@pytest.fixture
def console_stream():
    """Captures the live console output of a LogSink."""
    return io.StringIO()


@pytest.fixture
def sink(console_stream):
    """A LogSink that writes to a StringIO instead of stderr."""
    return LogSink(file=console_stream)


@pytest.fixture
def fake_runner(sink):
    return FakeRunner(sink)


@pytest.fixture
def manifest_yaml():
    """A complete manifest document."""
    return b"""\
src: s3://example-bucket/app/app-v42.tar.gz
checksum: e0840daaa97cd2cf2175f9e5d133ffb3324a2b93
dest: /home/example/app
excludes:
  - "*.pyc"
  - .git
commands:
  pre:
    - echo deploy start
    - make prepare
  post:
    - echo deploy done
  success:
    - cat > /tmp/success.log
  failure:
    - cat > /tmp/failure.log
    - notify-team
"""
