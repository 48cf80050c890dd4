# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The manifest resolution and execution engine:
# - ContentFetcher: s3 / http(s) / file content resolution
# - EventSource: Serf raw line or Consul JSON trigger extraction
# - decode_manifest / encode_manifest: YAML manifest codec
# - ArchiveSync: fetch, verify, extract and rsync the deploy archive
# - DeployOrchestrator: Deploy pipeline + success/failure hooks
# - Agent: one run per event
# -----------------------------------------------------------------------------

from .agent import Agent
from .deployer import CommandStep, DeployOrchestrator, DeployState, build_deploy_steps
from .events import ConsulEventSource, EventSource, RawLineSource, event_source_for
from .fetcher import ContentFetcher
from .manifest import decode_manifest, encode_manifest
from .sync import ArchiveSync

__all__ = [
    "Agent",
    "ArchiveSync",
    "CommandStep", "DeployOrchestrator", "DeployState", "build_deploy_steps",
    "ConsulEventSource", "EventSource", "RawLineSource", "event_source_for",
    "ContentFetcher",
    "decode_manifest", "encode_manifest",
]
