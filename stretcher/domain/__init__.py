# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# The Manifest contract, the trigger event, content locations and the
# error taxonomy shared by every layer.
# -----------------------------------------------------------------------------

from .errors import (
    ConfigError,
    DeployError,
    FetchError,
    ManifestParseError,
    NoEventError,
    ParseError,
    StretcherError,
)
from .models import Commands, ContentLocation, ContentScheme, DeployEvent, Manifest

__all__ = [
    "Commands", "ContentLocation", "ContentScheme", "DeployEvent", "Manifest",
    "StretcherError", "ConfigError", "NoEventError", "ParseError",
    "ManifestParseError", "FetchError", "DeployError",
]
