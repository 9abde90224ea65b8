from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

import acoustid

from .config import AcoustidSettings
from .errors import ArgumentError
from .fingerprinter import Fingerprinter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AcoustidMatch:
    score: float
    recording_id: str
    title: Optional[str] = None
    artist: Optional[str] = None


class AcoustidLookup:
    """Resolve Chromaprint fingerprints to MusicBrainz recordings via AcoustID."""

    def __init__(self, settings: AcoustidSettings) -> None:
        self.settings = settings

    def match(self, fingerprint: str, duration: float) -> List[AcoustidMatch]:
        if not self.settings.api_key:
            raise ArgumentError("an AcoustID API key is required for lookups")
        if duration <= 0:
            raise ArgumentError(f"duration must be positive, got {duration}")
        try:
            response = acoustid.lookup(
                self.settings.api_key,
                fingerprint,
                int(round(duration)),
                timeout=self.settings.timeout_seconds,
            )
        except acoustid.AcoustidError as exc:
            logger.warning("AcoustID lookup failed: %s", exc)
            return []
        if response.get("status") != "ok":
            error = response.get("error") or {}
            logger.warning("AcoustID lookup rejected: %s", error.get("message", "unknown error"))
            return []
        matches = list(self._iter_matches(response))
        matches.sort(key=lambda item: item.score, reverse=True)
        logger.debug("AcoustID returned %d recording(s)", len(matches))
        return matches

    def match_fingerprinter(self, fingerprinter: Fingerprinter, duration: float) -> List[AcoustidMatch]:
        """Look up the fingerprint of a finished stream."""
        return self.match(fingerprinter.fingerprint(), duration)

    @staticmethod
    def _iter_matches(response: dict) -> Iterator[AcoustidMatch]:
        for result in response.get("results", []):
            score = float(result.get("score", 0))
            for recording in result.get("recordings", []) or []:
                rec_id = recording.get("id")
                if not rec_id:
                    continue
                artists = recording.get("artists") or []
                artist_name = (
                    artists[0]["name"]
                    if artists and isinstance(artists[0], dict) and "name" in artists[0]
                    else None
                )
                yield AcoustidMatch(score, rec_id, recording.get("title"), artist_name)
