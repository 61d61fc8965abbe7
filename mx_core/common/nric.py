# mx_core/common/nric.py
"""
Singapore NRIC/FIN checksum.

An identifier is 9 characters: prefix letter (S, T, F, G or M), 7 digits and a
checksum letter. The checksum is the weighted digit sum plus a prefix offset,
modulo 11, looked up in the alphabet of the prefix group.
"""
from __future__ import annotations

import random
import re

from mx_core.common.errors import InvalidArgument

WEIGHTS = (2, 7, 6, 5, 4, 3, 2)

ST_ALPHABET = ("J", "Z", "I", "H", "G", "F", "E", "D", "C", "B", "A")
FG_ALPHABET = ("X", "W", "U", "T", "R", "Q", "P", "N", "M", "L", "K")
M_ALPHABET = ("K", "L", "J", "N", "P", "Q", "R", "T", "U", "W", "X")

ALPHABETS = {
    "S": ST_ALPHABET,
    "T": ST_ALPHABET,
    "F": FG_ALPHABET,
    "G": FG_ALPHABET,
    "M": M_ALPHABET,
}

OFFSETS = {"S": 0, "F": 0, "T": 4, "G": 4, "M": 3}

PREFIXES = tuple(ALPHABETS.keys())

NRIC_RE = re.compile(r"[STFGM][0-9]{7}[A-Z]")
DIGITS_RE = re.compile(r"[0-9]{7}")


def normalize(value: str | None) -> str:
    return (value or "").strip().upper()


def _checksum(prefix: str, digits: str) -> str:
    total = sum(int(d) * w for d, w in zip(digits, WEIGHTS))
    total += OFFSETS[prefix]
    return ALPHABETS[prefix][total % 11]


def checksum(prefix: str, digits: str) -> str:
    """
    Checksum letter for ``prefix`` + ``digits``.
    Raises InvalidArgument for an unknown prefix or anything but 7 digits.
    """
    p = normalize(prefix)
    if p not in ALPHABETS:
        raise InvalidArgument(f"NRIC prefix must be one of {', '.join(PREFIXES)}.")
    if not isinstance(digits, str) or not DIGITS_RE.fullmatch(digits):
        raise InvalidArgument("NRIC digits must be exactly 7 numeric characters.")
    return _checksum(p, digits)


def generate(prefix: str, digits: str) -> str:
    p = normalize(prefix)
    return f"{p}{digits}{checksum(p, digits)}"


def validate(value) -> bool:
    if not isinstance(value, str):
        return False

    nric = normalize(value)
    if not NRIC_RE.fullmatch(nric):
        return False

    return nric[8] == _checksum(nric[0], nric[1:8])


def random_identifier(prefix: str = "S", rng: random.Random | None = None) -> str:
    """Valid identifier with random digits (seed data / test fixtures)."""
    r = rng or random.Random()
    digits = f"{r.randint(0, 9_999_999):07d}"
    return generate(prefix, digits)
