"""
Harmonic Relation Evaluator: describe how two deck keys relate on the Camelot wheel.

Keys are accepted in Camelot notation (1A-12B) or standard notation
("Am", "F#m", "Bb", "C# major", "A minor"). The relation is one of four
labels, from closest to loosest:

- perfect match: same Camelot code
- harmonic match (±1 semitone): neighbour on the wheel, or relative major/minor
- compatible (±2 semitones): two steps round the wheel, or a diagonal move
- energy match preserved: anything else, including unknown keys
"""

import logging
import re
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

PERFECT_MATCH = "perfect match"
HARMONIC_MATCH = "harmonic match (±1 semitone)"
COMPATIBLE = "compatible (±2 semitones)"
ENERGY_MATCH = "energy match preserved"

RELATIONS = (PERFECT_MATCH, HARMONIC_MATCH, COMPATIBLE, ENERGY_MATCH)

# Standard: C, C#/Db, D, D#/Eb, E, F, F#/Gb, G, G#/Ab, A, A#/Bb, B
STANDARD_TO_CAMELOT_MAJOR = {
    "C": "8B",
    "C#": "3B",
    "Db": "3B",
    "D": "10B",
    "D#": "5B",
    "Eb": "5B",
    "E": "12B",
    "F": "7B",
    "F#": "2B",
    "Gb": "2B",
    "G": "9B",
    "G#": "4B",
    "Ab": "4B",
    "A": "11B",
    "A#": "6B",
    "Bb": "6B",
    "B": "1B",
}

STANDARD_TO_CAMELOT_MINOR = {
    "C": "5A",
    "C#": "12A",
    "Db": "12A",
    "D": "7A",
    "D#": "2A",
    "Eb": "2A",
    "E": "9A",
    "F": "4A",
    "F#": "11A",
    "Gb": "11A",
    "G": "6A",
    "G#": "1A",
    "Ab": "1A",
    "A": "8A",
    "A#": "3A",
    "Bb": "3A",
    "B": "10A",
}

_CAMELOT_RE = re.compile(r"^0?(1[0-2]|[1-9])([AB])$")
_STANDARD_RE = re.compile(
    r"^([A-G])([#b♯♭]?)\s*(m|min|minor|maj|major)?$",
    re.IGNORECASE,
)


def to_camelot(key: Optional[str]) -> Optional[str]:
    """
    Convert a key string to Camelot notation.

    Args:
        key: Camelot ("8A") or standard ("Am", "C# major") key, or None

    Returns:
        Camelot code such as "8A", or None if the key cannot be parsed
    """
    if not key:
        return None

    text = key.strip()
    camelot = _CAMELOT_RE.match(text.upper())
    if camelot:
        return f"{int(camelot.group(1))}{camelot.group(2)}"

    match = _STANDARD_RE.match(text)
    if not match:
        logger.debug(f"Unparseable key: {key!r}")
        return None

    note = match.group(1).upper()
    accidental = match.group(2).replace("♯", "#").replace("♭", "b")
    if accidental == "B":
        accidental = "b"
    mode = (match.group(3) or "").lower()

    mapping = STANDARD_TO_CAMELOT_MINOR if mode in ("m", "min", "minor") else STANDARD_TO_CAMELOT_MAJOR
    return mapping.get(note + accidental)


def _parse_camelot(code: str) -> Tuple[int, str]:
    return int(code[:-1]), code[-1]


def wheel_distance(num1: int, num2: int) -> int:
    """Steps between two Camelot numbers round the 12-position wheel."""
    diff = abs(num1 - num2) % 12
    return min(diff, 12 - diff)


def harmonic_relation(key_a: Optional[str], key_b: Optional[str]) -> str:
    """
    Classify the relation between the keys loaded on two decks.

    Args:
        key_a: Key of deck A
        key_b: Key of deck B

    Returns:
        One of RELATIONS
    """
    code_a = to_camelot(key_a)
    code_b = to_camelot(key_b)

    if code_a is None or code_b is None:
        return ENERGY_MATCH

    if code_a == code_b:
        return PERFECT_MATCH

    num_a, mode_a = _parse_camelot(code_a)
    num_b, mode_b = _parse_camelot(code_b)
    steps = wheel_distance(num_a, num_b)

    if mode_a == mode_b:
        if steps == 1:
            return HARMONIC_MATCH
        if steps == 2:
            return COMPATIBLE
        return ENERGY_MATCH

    # Mode change: relative key, or one step diagonally across the wheel
    if steps == 0:
        return HARMONIC_MATCH
    if steps == 1:
        return COMPATIBLE
    return ENERGY_MATCH
