"Chromaprint context binding with an attribute overlay."

from importlib import metadata

from .errors import (
    ArgumentError,
    ChromaprintError,
    ConfigurationWarning,
    FingerprintError,
    HandleClosedError,
    LibraryNotFoundError,
    ProtectedKeyError,
    ResourceError,
)
from .fingerprinter import Fingerprinter
from .native import decode_fingerprint, encode_fingerprint, hash_fingerprint, load_library, version
from .options import DEFAULT_ALGORITHM, Algorithm

__all__ = [
    "__version__",
    "Algorithm",
    "ArgumentError",
    "ChromaprintError",
    "ConfigurationWarning",
    "DEFAULT_ALGORITHM",
    "FingerprintError",
    "Fingerprinter",
    "HandleClosedError",
    "LibraryNotFoundError",
    "ProtectedKeyError",
    "ResourceError",
    "decode_fingerprint",
    "encode_fingerprint",
    "hash_fingerprint",
    "load_library",
    "version",
]


def __getattr__(name: str) -> str:
    if name == "__version__":
        try:
            return metadata.version("audio-chroma")
        except metadata.PackageNotFoundError:  # pragma: no cover - during editable dev installs
            return "0.0.0"
    raise AttributeError(name)
