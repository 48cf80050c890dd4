# -----------------------------------------------------------------------------
# STRETCHER - DEPLOY AGENT
# -----------------------------------------------------------------------------
# Invoked once per Consul/Serf event. Resolves a deployment manifest,
# executes it, and pipes the run log into the success or failure hooks.
# -----------------------------------------------------------------------------

__version__ = "0.3.0"

__all__ = ["__version__"]
