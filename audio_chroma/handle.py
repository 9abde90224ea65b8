from __future__ import annotations

import logging
import weakref
from enum import Enum
from typing import Any, List, Optional

from .errors import HandleClosedError, ResourceError
from .options import Algorithm
from .overlay import AttributeOverlay

logger = logging.getLogger(__name__)


class HandleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CREATED = "created"
    RELEASED = "released"


def _free_context(library: Any, ctx: Any, identity: int) -> None:
    # Runs from weakref.finalize, which fires at most once per handle.
    logger.debug("Releasing chromaprint context 0x%x", identity)
    library.free(ctx)


class NativeHandle:
    """Exclusive owner of one ChromaprintContext pointer.

    ``chromaprint_free`` is reachable only through a ``weakref.finalize``
    registered at creation. The finalizer is invoked either by ``release()``
    or by the collector once the handle is unreachable, and the runtime
    guarantees it runs at most once, so there is no second path to the
    native free call.
    """

    def __init__(self, library: Any) -> None:
        self._library = library
        self._ctx: Any = None
        self._identity: Optional[int] = None
        self._finalizer: Optional[weakref.finalize] = None

    @classmethod
    def open(cls, library: Any, algorithm: Algorithm) -> "NativeHandle":
        handle = cls(library)
        handle.create(algorithm)
        return handle

    @property
    def state(self) -> HandleState:
        if self._finalizer is None:
            return HandleState.UNINITIALIZED
        if self._finalizer.alive:
            return HandleState.CREATED
        return HandleState.RELEASED

    @property
    def alive(self) -> bool:
        return self.state is HandleState.CREATED

    @property
    def identity(self) -> Optional[int]:
        return self._identity

    @property
    def library(self) -> Any:
        return self._library

    def create(self, algorithm: Algorithm) -> None:
        if self._finalizer is not None:
            raise RuntimeError(f"handle is already {self.state.value}")
        ctx = self._library.new(int(algorithm))
        if ctx is None:
            raise ResourceError(f"chromaprint_new({int(algorithm)}) failed to allocate a context")
        identity = self._library.address(ctx)
        self._ctx = ctx
        self._identity = identity
        self._finalizer = weakref.finalize(self, _free_context, self._library, ctx, identity)
        logger.debug("Created chromaprint context 0x%x (%s)", identity, algorithm.symbol)

    def bind(self, overlay: AttributeOverlay) -> None:
        """Record this handle's identity in the overlay's reserved entry."""
        overlay._bind_handle(self._require())

    def apply_option(self, name: str, value: int) -> None:
        """Forward an option to chromaprint_set_option.

        The native call reports nothing back, so this is best effort: the
        outcome is neither checked nor retried.
        """
        self._require()
        logger.debug("Setting %s=%s on context 0x%x", name, value, self._identity)
        self._library.set_option(self._ctx, name, value)

    def query_algorithm(self) -> int:
        """Ask the library which algorithm the context uses.

        Advisory only; some builds ship this entry point as a stub.
        """
        self._require()
        return self._library.get_algorithm(self._ctx)

    # Streaming calls. Each is spelled out so the context pointer never
    # reaches chromaprint_new/chromaprint_free outside create/release.

    def start(self, sample_rate: int, num_channels: int) -> bool:
        self._require()
        return self._library.start(self._ctx, sample_rate, num_channels)

    def feed(self, data: Any) -> bool:
        self._require()
        return self._library.feed(self._ctx, data)

    def finish(self) -> bool:
        self._require()
        return self._library.finish(self._ctx)

    def clear_fingerprint(self) -> bool:
        self._require()
        return self._library.clear_fingerprint(self._ctx)

    def get_fingerprint(self) -> Optional[str]:
        self._require()
        return self._library.get_fingerprint(self._ctx)

    def get_raw_fingerprint(self) -> Optional[List[int]]:
        self._require()
        return self._library.get_raw_fingerprint(self._ctx)

    def get_fingerprint_hash(self) -> Optional[int]:
        self._require()
        return self._library.get_fingerprint_hash(self._ctx)

    def get_delay_ms(self) -> int:
        self._require()
        return self._library.get_delay_ms(self._ctx)

    def release(self) -> None:
        if self._finalizer is None:
            return
        # A dead finalizer ignores further calls.
        self._finalizer()
        self._ctx = None

    def _require(self) -> int:
        state = self.state
        if state is not HandleState.CREATED:
            raise HandleClosedError(f"chromaprint context is {state.value}")
        return self._identity  # type: ignore[return-value]

    def __copy__(self) -> "NativeHandle":
        raise TypeError("NativeHandle cannot be copied")

    def __deepcopy__(self, memo: dict) -> "NativeHandle":
        raise TypeError("NativeHandle cannot be copied")

    def __reduce__(self):
        raise TypeError("NativeHandle cannot be pickled")

    def __repr__(self) -> str:
        if self._identity is None:
            return f"NativeHandle(state={self.state.value!r})"
        return f"NativeHandle(0x{self._identity:x}, state={self.state.value!r})"
