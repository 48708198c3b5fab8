"""
Track Library adapter: normalize track records before they reach a deck.

Tracks come from the library as loose dicts (JSON exports, uploads,
generated tracks). Missing fields get the library defaults so a deck
always receives a complete record.
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_ARTIST = "Unknown Artist"
DEFAULT_BPM = 128
DEFAULT_KEY = "Am"
DEFAULT_ENERGY = "Groove"


class LibraryError(Exception):
    """Raised when a track list cannot be read."""
    pass


@dataclass(frozen=True)
class Track:
    """Immutable track record as supplied by the library."""

    id: str
    title: str
    artist: str = DEFAULT_ARTIST
    bpm: int = DEFAULT_BPM
    key: str = DEFAULT_KEY
    duration: int = 0
    energy: Optional[str] = DEFAULT_ENERGY
    artwork: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_duration(duration: Any) -> int:
    """
    Duration in seconds from a number or an "m:ss" string.

    Returns 0 for anything unparseable.
    """
    if isinstance(duration, (int, float)) and not isinstance(duration, bool):
        return max(0, int(duration))

    if isinstance(duration, str):
        parts = duration.split(":")
        if len(parts) == 2:
            try:
                return int(parts[0]) * 60 + int(parts[1])
            except ValueError:
                pass
    return 0


def track_from_dict(data: Dict[str, Any]) -> Track:
    """
    Build a Track from a library record, filling in defaults.

    Args:
        data: Dict with at least "id"; "title" falls back to "name"

    Returns:
        Track

    Raises:
        LibraryError: If the record has no id
    """
    track_id = data.get("id")
    if not track_id:
        raise LibraryError(f"Track record without id: {data!r}")

    try:
        bpm = int(round(float(data.get("bpm") or DEFAULT_BPM)))
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Track {track_id}: invalid bpm {data.get('bpm')!r}, using {DEFAULT_BPM}")
        bpm = DEFAULT_BPM

    return Track(
        id=str(track_id),
        title=data.get("title") or data.get("name") or str(track_id),
        artist=data.get("artist") or DEFAULT_ARTIST,
        bpm=bpm,
        key=data.get("key") or DEFAULT_KEY,
        duration=parse_duration(data.get("duration")),
        energy=data.get("energy") or DEFAULT_ENERGY,
        artwork=data.get("artwork") or None,
    )


def load_library(path: str) -> List[Track]:
    """
    Load a JSON track list (a list of track records, or {"tracks": [...]}).

    Records that cannot be converted are skipped with a warning.

    Raises:
        LibraryError: If the file cannot be read or is not a track list
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise LibraryError(f"Failed to read library {path}: {e}")

    records = payload.get("tracks") if isinstance(payload, dict) else payload
    if not isinstance(records, list):
        raise LibraryError(f"Library {path} does not contain a track list")

    tracks = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning(f"Skipping non-object library entry: {record!r}")
            continue
        try:
            tracks.append(track_from_dict(record))
        except LibraryError as e:
            logger.warning(f"Skipping library entry: {e}")

    logger.info(f"✅ Loaded {len(tracks)} tracks from {path}")
    return tracks


def find_track(tracks: List[Track], track_id: str) -> Optional[Track]:
    for track in tracks:
        if track.id == track_id:
            return track
    return None
