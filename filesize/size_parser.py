from __future__ import annotations

import math
import re
from types import MappingProxyType

from filesize.errors import (
    EmptyInputError,
    InvalidFormatError,
    InvalidNumberError,
    NegativeSizeError,
    SizeError,
    SizeOverflowError,
    UnknownUnitError,
)

BYTE = 1

KIB = BYTE * 1024
MIB = KIB * 1024
GIB = MIB * 1024
TIB = GIB * 1024
PIB = TIB * 1024

KB = BYTE * 1000
MB = KB * 1000
GB = MB * 1000
TB = GB * 1000
PB = TB * 1000

INT64_MAX = 2**63 - 1

_SIZE_PATTERN = re.compile(r"(?P<num>-?[0-9]+(?:\.[0-9]+)?)[ \t\n\r\f\v]*(?P<unit>[a-zA-Z]*)")
SIZE_UNITS = MappingProxyType(
    {
        "b": BYTE,
        "byte": BYTE,
        "bytes": BYTE,
        # "k" and "kib" are both binary; decimal needs the explicit "kb" form.
        "k": KIB,
        "m": MIB,
        "g": GIB,
        "t": TIB,
        "p": PIB,
        "kib": KIB,
        "mib": MIB,
        "gib": GIB,
        "tib": TIB,
        "pib": PIB,
        "kb": KB,
        "mb": MB,
        "gb": GB,
        "tb": TB,
        "pb": PB,
    }
)
_FORMAT_UNITS = (
    ("PiB", PIB),
    ("TiB", TIB),
    ("GiB", GIB),
    ("MiB", MIB),
    ("KiB", KIB),
)


def parse_size(value: str) -> int:
    """
    Parse a human-readable size and return bytes.

    Accepted examples: "1024", "4k", "4KiB", "4KB", "1.5MiB", " 1 KiB ".
    Short letters (k, m, g, t, p) and the *ib forms are 1024-based, the
    *b forms (kb, mb, ...) are 1000-based. Fractional byte counts are
    truncated toward zero.

    Raises a SizeError subclass describing the first problem found.
    """
    text = value.strip()
    if not text:
        raise EmptyInputError(value)
    match = _SIZE_PATTERN.fullmatch(text)
    if not match:
        raise InvalidFormatError(text)

    number_text = match.group("num")
    unit = match.group("unit").lower()
    try:
        number: float | int = int(number_text) if "." not in number_text else float(number_text)
    except ValueError as exc:
        raise InvalidNumberError(text, number_text) from exc
    if number < 0:
        raise NegativeSizeError(text)

    multiplier = BYTE
    if unit:
        found = SIZE_UNITS.get(unit)
        if found is None:
            raise UnknownUnitError(text, unit)
        multiplier = found

    product = number * multiplier
    if isinstance(product, float) and not math.isfinite(product):
        raise SizeOverflowError(text)
    result = int(product)
    if result > INT64_MAX:
        raise SizeOverflowError(text)
    return result


def format_size(size: int) -> str:
    """Render a byte count with the largest fitting binary unit."""
    if size < 0:
        return "0 B"
    if size < KIB:
        return f"{size} B"
    for name, multiplier in _FORMAT_UNITS:
        if size >= multiplier:
            value = size / multiplier
            if value >= 100:
                return f"{value:.0f} {name}"
            if value >= 10:
                return f"{value:.1f} {name}"
            return f"{value:.2f} {name}"
    return f"{size} B"


def validate_size(value: str) -> SizeError | None:
    """Return the error parse_size would raise for value, or None when it parses."""
    try:
        parse_size(value)
    except SizeError as exc:
        return exc
    return None


def parse_size_or_default(raw: str | None, default: int) -> int:
    """
    Parse a size from an optional raw string.

    Returns default for missing, blank or invalid input.
    """
    text = (raw or "").strip()
    if not text:
        return default
    try:
        return parse_size(text)
    except SizeError:
        return default
