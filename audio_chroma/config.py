from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .options import (
    ALGORITHM_KEY,
    DEFAULT_ALGORITHM,
    SILENCE_THRESHOLD_KEY,
    SILENCE_THRESHOLD_MAX,
    SILENCE_THRESHOLD_MIN,
    algorithm_names,
    lookup_algorithm,
)


class FingerprintSettings(BaseModel):
    algorithm: str = DEFAULT_ALGORITHM.symbol
    silence_threshold: Optional[int] = Field(
        default=None, ge=SILENCE_THRESHOLD_MIN, le=SILENCE_THRESHOLD_MAX
    )

    @field_validator("algorithm", mode="before")
    @classmethod
    def _known_algorithm(cls, value: Any) -> str:
        resolved = lookup_algorithm(value)
        if resolved is None:
            raise ValueError(f"unknown algorithm {value!r} (known: {', '.join(algorithm_names())})")
        return resolved.symbol

    def as_pairs(self) -> List[Any]:
        pairs: List[Any] = [ALGORITHM_KEY, self.algorithm]
        if self.silence_threshold is not None:
            pairs += [SILENCE_THRESHOLD_KEY, self.silence_threshold]
        return pairs


class LibrarySettings(BaseModel):
    path: Optional[Path] = None

    @field_validator("path", mode="before")
    @classmethod
    def _expand_path(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value is None:
            return None
        return Path(value).expanduser().resolve()


class AcoustidSettings(BaseModel):
    api_key: Optional[str] = None
    timeout_seconds: float = Field(default=10.0, gt=0)


class Settings(BaseModel):
    fingerprint: FingerprintSettings = FingerprintSettings()
    library: LibrarySettings = LibrarySettings()
    acoustid: AcoustidSettings = AcoustidSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Path:
    if explicit_path:
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "audio-chroma.yaml", cwd / "audio-chroma.yml"):
        if candidate.exists():
            return candidate
    raise FileNotFoundError("Could not find audio-chroma.yaml; pass the path explicitly.")
