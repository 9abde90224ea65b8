from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from .errors import ArgumentError, ConfigurationWarning
from .options import (
    ALGORITHM_KEY,
    DEFAULT_ALGORITHM,
    HANDLE_OPTIONS,
    SILENCE_THRESHOLD_KEY,
    SILENCE_THRESHOLD_MAX,
    SILENCE_THRESHOLD_MIN,
    Algorithm,
    algorithm_names,
    lookup_algorithm,
)
from .overlay import AttributeOverlay

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TranslatedConfig:
    algorithm: Algorithm
    attributes: AttributeOverlay
    options: Dict[str, int] = field(default_factory=dict)


def translate(
    pairs: Sequence[Any],
    *,
    default: Algorithm = DEFAULT_ALGORITHM,
    stacklevel: int = 2,
) -> TranslatedConfig:
    """Split constructor arguments into algorithm, handle options and attributes.

    ``pairs`` is a flat ``key, value, key, value`` sequence. Nothing native is
    touched here, so a malformed sequence fails before any allocation.
    """
    items = list(pairs)
    if len(items) % 2:
        raise ArgumentError(
            f"expected key/value pairs, got an odd number of arguments ({len(items)})"
        )

    algorithm = default
    overlay = AttributeOverlay(algorithm)
    options: Dict[str, int] = {}

    for index in range(0, len(items), 2):
        key, value = items[index], items[index + 1]
        if not isinstance(key, str):
            # Attribute names are strings; other keys are stored by their text.
            key = str(key)
        if key == ALGORITHM_KEY:
            resolved = lookup_algorithm(value)
            if resolved is None:
                _warn(
                    f"unknown algorithm {value!r}; keeping {algorithm.symbol!r} "
                    f"(known: {', '.join(algorithm_names())})",
                    stacklevel,
                )
                continue
            algorithm = resolved
            continue
        if key in HANDLE_OPTIONS:
            coerced = _handle_option(key, value)
            if coerced is None:
                options.pop(key, None)
                _warn(f"ignoring {key}={value!r}; the native context keeps its own default", stacklevel)
            else:
                options[key] = coerced
        overlay[key] = value

    overlay._cache_algorithm(algorithm)
    return TranslatedConfig(algorithm=algorithm, attributes=overlay, options=options)


def _warn(message: str, stacklevel: int) -> None:
    logger.warning("%s", message)
    # +1 for this helper's own frame.
    warnings.warn(message, ConfigurationWarning, stacklevel=stacklevel + 1)


def _handle_option(key: str, value: Any) -> Optional[int]:
    """Coerce a handle option to the native int, or None if it cannot be."""
    if key == SILENCE_THRESHOLD_KEY:
        if isinstance(value, bool):
            return None
        try:
            number = int(value)
        except (TypeError, ValueError, OverflowError):
            return None
        if not SILENCE_THRESHOLD_MIN <= number <= SILENCE_THRESHOLD_MAX:
            return None
        return number
    return None  # pragma: no cover
