# -----------------------------------------------------------------------------
# INFRASTRUCTURE LAYER
# -----------------------------------------------------------------------------
# Low-level wrappers used by the core:
# - LogSink: console output mirrored into the run transcript
# - CommandRunner: `sh -c` invocation with stdin piping
# -----------------------------------------------------------------------------

from .log_sink import LogSink
from .shell import CommandRunner

__all__ = ["LogSink", "CommandRunner"]
