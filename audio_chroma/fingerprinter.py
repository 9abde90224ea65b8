from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterator, List, Optional

from .errors import ArgumentError, FingerprintError
from .handle import NativeHandle
from .native import Buffer, ChromaprintLibrary, load_library
from .options import Algorithm
from .overlay import AttributeOverlay
from .translator import translate

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)


class Fingerprinter:
    """A Chromaprint context plus a free-form attribute bag.

    Construct with a flat ``key, value`` sequence::

        fp = Fingerprinter("algorithm", "test3", "silence_threshold", 50, "artist", "X")

    ``algorithm`` and ``silence_threshold`` configure the native context;
    every other pair is stored in ``fp.attributes`` and is reachable with
    item access (``fp["artist"]``). The context is freed exactly once, by
    ``close()``/``with`` exit or, failing that, when the object is collected.
    """

    def __init__(self, *pairs: Any, library: Optional[ChromaprintLibrary] = None) -> None:
        config = translate(pairs, stacklevel=3)
        handle = NativeHandle.open(library if library is not None else load_library(), config.algorithm)
        try:
            for name, value in config.options.items():
                handle.apply_option(name, value)
            handle.bind(config.attributes)
        except BaseException:
            handle.release()
            raise
        self._handle = handle
        self._attributes = config.attributes

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        *pairs: Any,
        library: Optional[ChromaprintLibrary] = None,
    ) -> "Fingerprinter":
        """Build from loaded settings; explicit ``pairs`` override them."""
        if library is None:
            library = load_library(settings.library.path)
        return cls(*settings.fingerprint.as_pairs(), *pairs, library=library)

    # Accessors

    def algorithm(self) -> str:
        """Symbolic name of the algorithm this context was created with.

        Answered from the cached value in the overlay. ``chromaprint_get_algorithm``
        is not consulted because some library builds ship it as a stub that
        does not reflect the real configuration.
        """
        return self._attributes.algorithm.symbol

    def algorithm_code(self) -> Algorithm:
        return self._attributes.algorithm

    @property
    def attributes(self) -> AttributeOverlay:
        return self._attributes

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    @property
    def closed(self) -> bool:
        return not self._handle.alive

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._attributes.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._attributes[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._attributes[key] = value

    def __delitem__(self, key: str) -> None:
        del self._attributes[key]

    def __contains__(self, key: object) -> bool:
        return key in self._attributes

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    # Fingerprinting

    def start(self, sample_rate: int, num_channels: int) -> None:
        if sample_rate <= 0 or num_channels <= 0:
            raise ArgumentError(
                f"sample_rate and num_channels must be positive, got {sample_rate}/{num_channels}"
            )
        self._check(self._handle.start(sample_rate, num_channels), "chromaprint_start")

    def feed(self, data: Buffer) -> None:
        """Feed interleaved signed 16-bit native-endian PCM samples."""
        if memoryview(data).nbytes % 2:
            raise ArgumentError("PCM data must contain whole 16-bit samples")
        self._check(self._handle.feed(data), "chromaprint_feed")

    def finish(self) -> None:
        self._check(self._handle.finish(), "chromaprint_finish")

    def fingerprint(self) -> str:
        return self._check(self._handle.get_fingerprint(), "chromaprint_get_fingerprint")

    def raw_fingerprint(self) -> List[int]:
        return self._check(self._handle.get_raw_fingerprint(), "chromaprint_get_raw_fingerprint")

    def fingerprint_hash(self) -> int:
        return self._check(self._handle.get_fingerprint_hash(), "chromaprint_get_fingerprint_hash")

    def clear_fingerprint(self) -> None:
        self._check(self._handle.clear_fingerprint(), "chromaprint_clear_fingerprint")

    def delay_ms(self) -> int:
        return self._handle.get_delay_ms()

    def fingerprint_pcm(self, data: Buffer, sample_rate: int, num_channels: int) -> str:
        self.start(sample_rate, num_channels)
        self.feed(data)
        self.finish()
        return self.fingerprint()

    @staticmethod
    def _check(result: Any, call: str) -> Any:
        if result is None or result is False:
            raise FingerprintError(f"{call} failed")
        return result

    # Lifetime

    def close(self) -> None:
        self._handle.release()

    def __enter__(self) -> "Fingerprinter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __copy__(self) -> "Fingerprinter":
        raise TypeError("Fingerprinter owns a native context and cannot be copied")

    def __deepcopy__(self, memo: dict) -> "Fingerprinter":
        raise TypeError("Fingerprinter owns a native context and cannot be copied")

    def __reduce__(self):
        raise TypeError("Fingerprinter owns a native context and cannot be pickled")

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Fingerprinter {self.algorithm()} {state} attributes={len(self._attributes)}>"
