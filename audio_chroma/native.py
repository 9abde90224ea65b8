"""cffi bindings for libchromaprint.

The library is opened in ABI mode (``ffi.dlopen``), so nothing is compiled
at install time. ``ChromaprintLibrary`` turns the raw C calls into methods
with Python types; the rest of the package only talks to that class, which
also lets tests substitute an in-memory fake.

Note:
    ``chromaprint_set_option`` is declared ``void``. Older releases return
    nothing and newer ones return a status that is not reliable across
    builds, so callers must not read anything into it.
"""
from __future__ import annotations

import ctypes.util
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from cffi import FFI

from .errors import FingerprintError, LibraryNotFoundError
from .options import Algorithm

logger = logging.getLogger(__name__)

LIBRARY_ENV = "AUDIO_CHROMA_LIBRARY"

_CDEF = """
typedef void ChromaprintContext;

const char *chromaprint_get_version(void);

ChromaprintContext *chromaprint_new(int algorithm);
void chromaprint_free(ChromaprintContext *ctx);

int chromaprint_get_algorithm(ChromaprintContext *ctx);
void chromaprint_set_option(ChromaprintContext *ctx, const char *name, int value);
int chromaprint_get_delay_ms(ChromaprintContext *ctx);

int chromaprint_start(ChromaprintContext *ctx, int sample_rate, int num_channels);
int chromaprint_feed(ChromaprintContext *ctx, const int16_t *data, int size);
int chromaprint_finish(ChromaprintContext *ctx);

int chromaprint_get_fingerprint(ChromaprintContext *ctx, char **fingerprint);
int chromaprint_get_raw_fingerprint(ChromaprintContext *ctx, uint32_t **fingerprint, int *size);
int chromaprint_get_fingerprint_hash(ChromaprintContext *ctx, uint32_t *hash);
int chromaprint_clear_fingerprint(ChromaprintContext *ctx);

int chromaprint_encode_fingerprint(const uint32_t *fp, int size, int algorithm,
                                   char **encoded_fp, int *encoded_size, int base64);
int chromaprint_decode_fingerprint(const char *encoded_fp, int encoded_size,
                                   uint32_t **fp, int *size, int *algorithm, int base64);
int chromaprint_hash_fingerprint(const uint32_t *fp, int size, uint32_t *hash);

void chromaprint_dealloc(void *ptr);
"""

Buffer = Union[bytes, bytearray, memoryview]


class ChromaprintLibrary:
    """Typed facade over the loaded shared library.

    Context-level methods return ``False``/``None`` when the native call
    reports failure; the managed object decides how to surface that.
    """

    def __init__(self, ffi: FFI, lib: object, path: Optional[str] = None) -> None:
        self.ffi = ffi
        self.lib = lib
        self.path = path

    # Context lifecycle

    def new(self, algorithm: int):
        ctx = self.lib.chromaprint_new(int(algorithm))
        if ctx == self.ffi.NULL:
            return None
        return ctx

    def free(self, ctx) -> None:
        self.lib.chromaprint_free(ctx)

    def address(self, ctx) -> int:
        return int(self.ffi.cast("uintptr_t", ctx))

    def set_option(self, ctx, name: str, value: int) -> None:
        self.lib.chromaprint_set_option(ctx, name.encode("ascii"), int(value))

    def get_algorithm(self, ctx) -> int:
        return int(self.lib.chromaprint_get_algorithm(ctx))

    def get_delay_ms(self, ctx) -> int:
        return int(self.lib.chromaprint_get_delay_ms(ctx))

    # Streaming

    def start(self, ctx, sample_rate: int, num_channels: int) -> bool:
        return bool(self.lib.chromaprint_start(ctx, int(sample_rate), int(num_channels)))

    def feed(self, ctx, data: Buffer) -> bool:
        samples = memoryview(data).nbytes // 2
        if not samples:
            return True
        buf = self.ffi.from_buffer("int16_t[]", data)
        return bool(self.lib.chromaprint_feed(ctx, buf, samples))

    def finish(self, ctx) -> bool:
        return bool(self.lib.chromaprint_finish(ctx))

    def clear_fingerprint(self, ctx) -> bool:
        return bool(self.lib.chromaprint_clear_fingerprint(ctx))

    # Results

    def get_fingerprint(self, ctx) -> Optional[str]:
        out = self.ffi.new("char **")
        if not self.lib.chromaprint_get_fingerprint(ctx, out):
            return None
        try:
            return self.ffi.string(out[0]).decode("ascii")
        finally:
            self.lib.chromaprint_dealloc(out[0])

    def get_raw_fingerprint(self, ctx) -> Optional[List[int]]:
        out = self.ffi.new("uint32_t **")
        size = self.ffi.new("int *")
        if not self.lib.chromaprint_get_raw_fingerprint(ctx, out, size):
            return None
        try:
            return list(self.ffi.unpack(out[0], size[0]))
        finally:
            self.lib.chromaprint_dealloc(out[0])

    def get_fingerprint_hash(self, ctx) -> Optional[int]:
        out = self.ffi.new("uint32_t *")
        if not self.lib.chromaprint_get_fingerprint_hash(ctx, out):
            return None
        return int(out[0])

    # Context-free helpers

    def version(self) -> str:
        return self.ffi.string(self.lib.chromaprint_get_version()).decode("ascii")

    def encode_fingerprint(self, raw: Sequence[int], algorithm: int, base64: bool = True) -> Optional[bytes]:
        values = self.ffi.new("uint32_t[]", list(raw))
        out = self.ffi.new("char **")
        size = self.ffi.new("int *")
        ok = self.lib.chromaprint_encode_fingerprint(
            values, len(raw), int(algorithm), out, size, 1 if base64 else 0
        )
        if not ok:
            return None
        try:
            return self.ffi.unpack(out[0], size[0])
        finally:
            self.lib.chromaprint_dealloc(out[0])

    def decode_fingerprint(self, encoded: bytes, base64: bool = True) -> Optional[Tuple[List[int], int]]:
        out = self.ffi.new("uint32_t **")
        size = self.ffi.new("int *")
        algorithm = self.ffi.new("int *")
        ok = self.lib.chromaprint_decode_fingerprint(
            encoded, len(encoded), out, size, algorithm, 1 if base64 else 0
        )
        if not ok:
            return None
        try:
            return list(self.ffi.unpack(out[0], size[0])), int(algorithm[0])
        finally:
            self.lib.chromaprint_dealloc(out[0])

    def hash_fingerprint(self, raw: Sequence[int]) -> Optional[int]:
        values = self.ffi.new("uint32_t[]", list(raw))
        out = self.ffi.new("uint32_t *")
        if not self.lib.chromaprint_hash_fingerprint(values, len(raw), out):
            return None
        return int(out[0])

    def __repr__(self) -> str:
        return f"ChromaprintLibrary(path={self.path!r})"


_LOADED: Dict[str, ChromaprintLibrary] = {}


def _candidate_names() -> List[str]:
    names: List[str] = []
    env_path = os.environ.get(LIBRARY_ENV)
    if env_path:
        names.append(env_path)
    found = ctypes.util.find_library("chromaprint")
    if found:
        names.append(found)
    if sys.platform == "darwin":
        names += ["libchromaprint.1.dylib", "libchromaprint.dylib"]
    elif sys.platform.startswith("win"):
        names += ["chromaprint.dll", "libchromaprint.dll"]
    else:
        names += ["libchromaprint.so.1", "libchromaprint.so"]
    return names


def load_library(path: Optional[Union[str, Path]] = None) -> ChromaprintLibrary:
    """Open libchromaprint, caching the result per resolved name.

    An explicit ``path`` wins; otherwise ``$AUDIO_CHROMA_LIBRARY``, then
    whatever ``ctypes.util.find_library`` reports, then the usual sonames.
    """
    candidates = [os.fspath(path)] if path is not None else _candidate_names()
    errors: List[str] = []
    for name in candidates:
        cached = _LOADED.get(name)
        if cached is not None:
            return cached
        ffi = FFI()
        ffi.cdef(_CDEF)
        try:
            lib = ffi.dlopen(name)
        except OSError as exc:
            errors.append(f"{name}: {exc}")
            continue
        library = ChromaprintLibrary(ffi, lib, name)
        _LOADED[name] = library
        logger.debug("Loaded chromaprint from %s", name)
        return library
    raise LibraryNotFoundError(
        "libchromaprint not found (tried: " + "; ".join(errors or candidates) + ")"
    )


def version(library: Optional[ChromaprintLibrary] = None) -> str:
    return (library or load_library()).version()


def encode_fingerprint(
    raw: Sequence[int],
    algorithm: Union[Algorithm, int],
    base64: bool = True,
    library: Optional[ChromaprintLibrary] = None,
) -> bytes:
    """Compress a raw fingerprint into Chromaprint's transport encoding."""
    encoded = (library or load_library()).encode_fingerprint(raw, int(algorithm), base64)
    if encoded is None:
        raise FingerprintError("chromaprint_encode_fingerprint failed")
    return encoded


def decode_fingerprint(
    encoded: Union[str, bytes],
    base64: bool = True,
    library: Optional[ChromaprintLibrary] = None,
) -> Tuple[List[int], Algorithm]:
    """Inverse of :func:`encode_fingerprint`; also reports the algorithm."""
    data = encoded.encode("ascii") if isinstance(encoded, str) else bytes(encoded)
    decoded = (library or load_library()).decode_fingerprint(data, base64)
    if decoded is None:
        raise FingerprintError("chromaprint_decode_fingerprint failed")
    raw, code = decoded
    try:
        return raw, Algorithm(code)
    except ValueError:
        raise FingerprintError(f"decoded fingerprint uses unknown algorithm {code}") from None


def hash_fingerprint(raw: Sequence[int], library: Optional[ChromaprintLibrary] = None) -> int:
    value = (library or load_library()).hash_fingerprint(raw)
    if value is None:
        raise FingerprintError("chromaprint_hash_fingerprint failed")
    return value
