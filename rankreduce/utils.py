# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any

def check_pos(msg: str, value: int | float):
    if value <= 0:
        raise ValueError(f"{msg} must be above zero, got {value}")

def check_non_neg(msg: str, value: int | float):
    if value < 0:
        raise ValueError(f"{msg} must be a positive, got {value}")

def check_at_least(msg: str, value: int, lower: int):
    if value < lower:
        raise ValueError(f"{msg} must be at least {lower}, got {value}")

def to_scalar(value: Any) -> complex | float:
    """Python scalar of a zero-dimensional array, complex only if the imaginary part is nonzero."""
    cval = complex(value)
    return cval.real if cval.imag == 0 else cval

def is_invertible(value: complex | float, largest: float) -> bool:
    """True if 1/value is finite in a floating type whose largest finite value is largest."""
    return abs(value) * largest > 1.0
