"""Serial and drawing number generation.

Pure functions mapping a counter value and door attributes to the
identifiers engraved on the door plate:

    serial_number(6, "1.8")   -> "MF42-18-0006"
    drawing_number(206)       -> "S206"

The counter itself lives in the ``serial_counter`` table and is advanced
atomically by the doors service; nothing here touches storage.
"""

from typing import Dict, Mapping, Optional

from ..config import DEFAULT_SIZE_CODES
from ..errors import ValidationError


VALID_PRESSURES = (140, 400)

# Pressure (kPa) -> door type. High pressure doors are the V1 design.
DOOR_TYPES: Dict[int, str] = {
    400: "V1",
    140: "V2",
}


def size_code(size: str, size_codes: Optional[Mapping[str, str]] = None) -> str:
    """Return the two digit size code for a door size.

    Raises:
        ValidationError: If the size is not a known door size
    """
    codes = size_codes if size_codes is not None else DEFAULT_SIZE_CODES
    key = str(size).strip()
    if key not in codes:
        raise ValidationError(
            f"Invalid size '{size}'. Must be one of: "
            f"{', '.join(sorted(k for k in codes if '.' in k))}"
        )
    return codes[key]


def next_serial(counter_base: int, sequence_count: int) -> int:
    """Number for the next door given the configured base and the counter value.

    ``sequence_count`` is the value returned by the atomic counter increment,
    i.e. 1 for the very first door. Deleting doors never decrements it, so
    numbers are never reused.
    """
    if sequence_count < 1:
        raise ValidationError("Sequence count must be positive")
    return counter_base + sequence_count


def serial_number(
    door_number: int,
    size: str,
    prefix: str = "MF42",
    size_codes: Optional[Mapping[str, str]] = None,
) -> str:
    """Build a serial number: ``{prefix}-{size_code}-{door_number:04d}``."""
    if door_number < 1:
        raise ValidationError("Door number must be at least 1")
    return f"{prefix}-{size_code(size, size_codes)}-{door_number:04d}"


def drawing_number(n: int) -> str:
    """Build a drawing number: ``S`` followed by ``n`` padded to three digits."""
    return f"S{n:03d}"


def door_type_for_pressure(pressure: int) -> str:
    try:
        return DOOR_TYPES[int(pressure)]
    except (KeyError, TypeError, ValueError):
        raise ValidationError(
            f"Invalid pressure '{pressure}'. Must be one of: "
            f"{', '.join(str(p) for p in VALID_PRESSURES)}"
        )


def describe_door(size: str, pressure: int) -> str:
    """Human readable description printed on certificates."""
    return f"{size} Meter {pressure} kPa Refuge Bay Door"
