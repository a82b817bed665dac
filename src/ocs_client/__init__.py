"""High-level OCS Inventory client entrypoints."""
from .client import OCSClient
from .config import ClientConfig
from .constants import Checksum, Wanted
from .exceptions import (
    ConfigurationError,
    OCSError,
    RemoteError,
    TransportError,
    UnmappedFieldWarning,
)
from .iterator import ComputerIterator
from .prune import DEFAULT_FIELD_NAMES, prune

__all__ = [
    "OCSClient",
    "ClientConfig",
    "ComputerIterator",
    "Checksum",
    "Wanted",
    "OCSError",
    "ConfigurationError",
    "RemoteError",
    "TransportError",
    "UnmappedFieldWarning",
    "DEFAULT_FIELD_NAMES",
    "prune",
]
