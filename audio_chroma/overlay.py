from __future__ import annotations

import copy
from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, Optional

from .errors import ArgumentError, ProtectedKeyError
from .options import DEFAULT_ALGORITHM, HANDLE_KEY, Algorithm


class AttributeOverlay(MutableMapping):
    """Free-form attribute bag attached to a Fingerprinter.

    Values go in and come out as deep copies, so neither the caller's
    original object nor a value obtained from a read can change what is
    stored. The only entry tied to the native side is HANDLE_KEY, which
    holds the context address and can be written once through
    ``_bind_handle`` only. Nothing here calls into libchromaprint.

    Values that cannot be deep-copied (locks, open files, another
    Fingerprinter) are rejected with ArgumentError.
    """

    def __init__(self, algorithm: Algorithm = DEFAULT_ALGORITHM) -> None:
        self._data: Dict[str, Any] = {}
        self._algorithm = algorithm

    @property
    def algorithm(self) -> Algorithm:
        """Resolved algorithm, cached so reads need no native round-trip."""
        return self._algorithm

    def _cache_algorithm(self, algorithm: Algorithm) -> None:
        self._algorithm = algorithm

    def _bind_handle(self, identity: int) -> None:
        if HANDLE_KEY in self._data:
            raise ProtectedKeyError(f"{HANDLE_KEY!r} is already bound")
        self._data[HANDLE_KEY] = identity

    def __getitem__(self, key: str) -> Any:
        return copy.deepcopy(self._data[key])

    def __setitem__(self, key: str, value: Any) -> None:
        if key == HANDLE_KEY:
            raise ProtectedKeyError(f"{HANDLE_KEY!r} is reserved for the native handle")
        try:
            stored = copy.deepcopy(value)
        except (TypeError, copy.Error) as exc:
            raise ArgumentError(f"value for {key!r} cannot be copied: {exc}") from exc
        self._data[key] = stored

    def __delitem__(self, key: str) -> None:
        if key == HANDLE_KEY:
            raise ProtectedKeyError(f"{HANDLE_KEY!r} is reserved for the native handle")
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        if key not in self._data:
            return default
        return self[key]

    def set(self, key: str, value: Any) -> None:
        self[key] = value

    def clear(self) -> None:
        self._data = {key: value for key, value in self._data.items() if key == HANDLE_KEY}

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        keys = sorted(map(str, self._data))
        return f"AttributeOverlay(algorithm={self._algorithm.symbol!r}, keys={keys!r})"
