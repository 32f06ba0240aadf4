"""Bit scans over 256-bit words."""

from v3sim.constants import UINT256_MAX
from v3sim.errors import NegativeInput, Overflow, ZeroInput


def most_significant_bit(x: int) -> int:
    """Index of the most significant set bit (0 = LSB, 255 = MSB).

    Satisfies 2**msb <= x < 2**(msb+1).

    Raises:
        ZeroInput: If x is zero
        Overflow: If x does not fit in 256 bits
    """
    _check(x)
    return x.bit_length() - 1


def least_significant_bit(x: int) -> int:
    """Index of the least significant set bit (0 = LSB, 255 = MSB).

    Satisfies x & 2**lsb != 0 and x & (2**lsb - 1) == 0.

    Raises:
        ZeroInput: If x is zero
        Overflow: If x does not fit in 256 bits
    """
    _check(x)
    return (x & -x).bit_length() - 1


def _check(x: int) -> None:
    if x == 0:
        raise ZeroInput("Bit scan requires x > 0")
    if x < 0:
        raise NegativeInput(f"Bit scan of negative value: {x}")
    if x > UINT256_MAX:
        raise Overflow(f"Bit scan input exceeds uint256: {x}")


__all__ = ["most_significant_bit", "least_significant_bit"]
