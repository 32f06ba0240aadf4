"""Checked integer arithmetic for fixed-width on-chain values.

Python integers never overflow, so every width limit the reference VM
enforces has to be checked explicitly. This module provides:

- SafeInt, a lightweight wrapper for unsigned amounts whose arithmetic
  raises instead of producing invalid results
- free functions for the signed/unsigned checked operations the swap loop
  uses (signed_add, signed_sub, unsigned_add, to_int256, ...)

Usage pattern:
    from v3sim.safe_int import S

    def fee_residual(amount_remaining: int, amount_in: int) -> int:
        # Wrap at entry
        remaining = S(amount_remaining)

        # Natural arithmetic - automatically checked
        residual = remaining - amount_in  # Raises Underflow if amount_in > remaining

        # Unwrap at exit, validating the width
        return residual.to_uint256()
"""

from __future__ import annotations

from v3sim.constants import INT128_MAX, INT128_MIN, INT256_MAX, INT256_MIN, UINT256_MAX
from v3sim.errors import Overflow, Underflow


class SafeInt:
    """Unsigned integer with checked arithmetic operations.

    Wraps an integer and provides arithmetic operators that raise
    descriptive errors instead of producing invalid results:
    - Negative results from subtraction raise Underflow
    - Values exceeding uint256 raise Overflow on to_uint256()

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt
        """
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __add__(self, other: SafeInt | int) -> SafeInt:
        """Add two values. Width is validated on conversion."""
        return SafeInt(self._value + _extract_value(other))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def to_uint256(self) -> int:
        """Convert to int, validating uint256 bounds."""
        return _check_unsigned(self._value, UINT256_MAX, "uint256")


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


def _check_unsigned(value: int, maximum: int, width: str) -> int:
    if value < 0:
        raise Underflow(f"Negative value cannot be {width}: {value}")
    if value > maximum:
        raise Overflow(f"Value exceeds {width} max: {value}")
    return value


def _check_signed(value: int, minimum: int, maximum: int, width: str) -> int:
    if value < minimum:
        raise Underflow(f"Value below {width} min: {value}")
    if value > maximum:
        raise Overflow(f"Value exceeds {width} max: {value}")
    return value


# =============================================================================
# Checked operations on raw ints
# =============================================================================


def to_int256(value: int) -> int:
    """Cast a uint256 to int256, failing if it does not fit.

    Raises:
        Overflow: If value > INT256_MAX
    """
    if value > INT256_MAX:
        raise Overflow(f"Value does not fit in int256: {value}")
    return value


def unsigned_add(x: int, y: int) -> int:
    """x + y, failing if the sum overflows uint256."""
    return _check_unsigned(x + y, UINT256_MAX, "uint256")


def signed_add(x: int, y: int) -> int:
    """x + y, failing if the sum leaves the int256 range."""
    return _check_signed(x + y, INT256_MIN, INT256_MAX, "int256")


def signed_sub(x: int, y: int) -> int:
    """x - y, failing if the difference leaves the int256 range."""
    return _check_signed(x - y, INT256_MIN, INT256_MAX, "int256")


def checked_int128_add(x: int, y: int) -> int:
    """x + y, failing if the sum leaves the int128 range."""
    return _check_signed(x + y, INT128_MIN, INT128_MAX, "int128")


def checked_int128_sub(x: int, y: int) -> int:
    """x - y, failing if the difference leaves the int128 range."""
    return _check_signed(x - y, INT128_MIN, INT128_MAX, "int128")


# Convenience alias for concise code
S = SafeInt

__all__ = [
    "SafeInt",
    "S",
    "to_int256",
    "unsigned_add",
    "signed_add",
    "signed_sub",
    "checked_int128_add",
    "checked_int128_sub",
]
