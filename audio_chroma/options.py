from __future__ import annotations

from enum import IntEnum
from typing import Any, List, Optional

# Constructor keys with special meaning. Keep these centralized to reduce
# magic strings and accidental divergence between the translator, the
# overlay and the settings model.

ALGORITHM_KEY = "algorithm"
SILENCE_THRESHOLD_KEY = "silence_threshold"
HANDLE_KEY = "handle"

# Options forwarded to chromaprint_set_option once the context exists.
HANDLE_OPTIONS = frozenset({SILENCE_THRESHOLD_KEY})

SILENCE_THRESHOLD_MIN = 0
SILENCE_THRESHOLD_MAX = 32767


class Algorithm(IntEnum):
    """Fingerprinting algorithms understood by libchromaprint."""

    TEST1 = 0
    TEST2 = 1
    TEST3 = 2
    TEST4 = 3
    TEST5 = 4

    @property
    def symbol(self) -> str:
        return self.name.lower()


DEFAULT_ALGORITHM = Algorithm.TEST2


def lookup_algorithm(value: Any) -> Optional[Algorithm]:
    """Resolve a symbolic name (case-insensitive) to an Algorithm.

    Returns None for anything the catalog does not know, including
    non-string values; callers decide whether that is fatal.
    """
    if isinstance(value, Algorithm):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Algorithm[value.strip().upper()]
    except KeyError:
        return None


def algorithm_names() -> List[str]:
    return [member.symbol for member in Algorithm]
