from __future__ import annotations


class ChromaprintError(Exception):
    """Base class for errors raised by the binding."""


class ArgumentError(ChromaprintError, ValueError):
    """Malformed constructor input. Raised before any native allocation."""


class ResourceError(ChromaprintError, MemoryError):
    """The native library could not allocate a context."""


class ProtectedKeyError(ChromaprintError, KeyError):
    """Attempt to overwrite the reserved handle-identity attribute."""

    def __str__(self) -> str:
        # KeyError.__str__ quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class HandleClosedError(ChromaprintError, RuntimeError):
    """A native call was attempted after the handle was released."""


class FingerprintError(ChromaprintError):
    """A native fingerprinting call reported failure."""


class LibraryNotFoundError(ChromaprintError, OSError):
    """libchromaprint could not be located or loaded."""


class ConfigurationWarning(UserWarning):
    """An unrecognized configuration value was ignored."""
