"""Full-precision fixed-point arithmetic on 256-bit words.

This module reproduces the VM's FullMath/UnsafeMath libraries bit for bit:
- mul_div computes floor(a*b/denominator) through a 512-bit intermediate,
  using Chinese-Remainder reconstruction and a Newton-Raphson modular
  inverse, with every internal step wrapping modulo 2**256
- mul_div_rounding_up / div_rounding_up round the quotient up
- sqrt is an integer square root by Newton-Raphson iteration

Python integers are unbounded, so the 256-bit modular behaviour of the
reference is emulated by masking with UINT256_MAX. Results that would not
fit in 256 bits raise Overflow instead of wrapping.
"""

from __future__ import annotations

from v3sim.constants import UINT256_MAX
from v3sim.errors import DivisionByZero, NegativeInput, NotConverged, Overflow

__all__ = [
    "mul_div",
    "mul_div_rounding_up",
    "mul_mod",
    "div_rounding_up",
    "sqrt",
    "SQRT_MAX_ITERATIONS",
]

_MASK = UINT256_MAX

# Newton-Raphson bound for sqrt; never reached for 256-bit inputs
SQRT_MAX_ITERATIONS = 1000


def _require_uint256(name: str, value: int) -> None:
    if value < 0:
        raise NegativeInput(f"{name} must be non-negative: {value}")
    if value > UINT256_MAX:
        raise Overflow(f"{name} exceeds uint256 max: {value}")


def mul_mod(a: int, b: int, modulus: int) -> int:
    """(a * b) % modulus with full precision, as the VM's mulmod opcode.

    Raises:
        DivisionByZero: If modulus is zero
    """
    if modulus == 0:
        raise DivisionByZero("mulmod by zero")
    return (a * b) % modulus


def mul_div(a: int, b: int, denominator: int) -> int:
    """Calculate floor(a*b/denominator) with full precision.

    The 512-bit product is held as two 256-bit limbs [prod1 prod0]. When
    prod1 is zero a plain 256-bit division suffices; otherwise the remainder
    is subtracted, powers of two are factored out of the denominator and the
    exact quotient is obtained by multiplying with the modular inverse of the
    (now odd) denominator.

    Args:
        a: The multiplicand (uint256)
        b: The multiplier (uint256)
        denominator: The divisor (uint256)

    Returns:
        The 256-bit result

    Raises:
        DivisionByZero: If denominator is zero
        Overflow: If the result does not fit in 256 bits
    """
    _require_uint256("a", a)
    _require_uint256("b", b)
    _require_uint256("denominator", denominator)
    if denominator == 0:
        raise DivisionByZero("mul_div denominator is zero")

    # Product mod 2**256 and mod 2**256 - 1, recombined via CRT into
    # product = prod1 * 2**256 + prod0
    mm = (a * b) % _MASK
    prod0 = (a * b) & _MASK
    prod1 = (mm - prod0 - (1 if mm < prod0 else 0)) & _MASK

    # 256 by 256 division
    if prod1 == 0:
        return prod0 // denominator

    # Result must be less than 2**256
    if denominator <= prod1:
        raise Overflow(f"mul_div result overflows uint256: {a} * {b} / {denominator}")

    # Make division exact by subtracting the remainder from [prod1 prod0]
    remainder = (a * b) % denominator
    prod1 = (prod1 - (1 if remainder > prod0 else 0)) & _MASK
    prod0 = (prod0 - remainder) & _MASK

    # Factor powers of two out of denominator; twos is always >= 1
    twos = -denominator & denominator
    denominator //= twos
    prod0 //= twos

    # Shift bits from prod1 into prod0: flip twos to 2**256 / twos
    twos = (((0 - twos) & _MASK) // twos + 1) & _MASK
    prod0 = (prod0 | (prod1 * twos)) & _MASK

    # Inverse of the odd denominator mod 2**256, seeded correct to four bits;
    # each Newton-Raphson step doubles the number of correct bits
    inv = ((3 * denominator) ^ 2) & _MASK
    for _ in range(6):
        inv = (inv * (2 - denominator * inv)) & _MASK

    return (prod0 * inv) & _MASK


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """Calculate ceil(a*b/denominator) with full precision.

    Raises:
        DivisionByZero: If denominator is zero
        Overflow: If the result (after rounding up) does not fit in 256 bits
    """
    result = mul_div(a, b, denominator)
    if mul_mod(a, b, denominator) > 0:
        if result >= UINT256_MAX:
            raise Overflow("mul_div_rounding_up result is uint256 max")
        result += 1
    return result


def div_rounding_up(x: int, y: int) -> int:
    """Return ceil(x / y) for uint256 operands.

    Raises:
        DivisionByZero: If y is zero
    """
    if y == 0:
        raise DivisionByZero(f"div_rounding_up: {x} / 0")
    return x // y + (1 if x % y else 0)


def sqrt(a: int, max_iterations: int = SQRT_MAX_ITERATIONS) -> int:
    """Integer square root, floor(sqrt(a)), by Newton-Raphson iteration.

    Starts from a power of two at or above the true root and iterates
    x' = (x + a // x) // 2 until the sequence stops decreasing, then snaps
    the fixed point to the floor by comparing x*x against a.

    Args:
        a: Non-negative integer
        max_iterations: Iteration bound before giving up

    Raises:
        NegativeInput: If a is negative
        NotConverged: If no fixed point is reached within max_iterations
    """
    if a < 0:
        raise NegativeInput(f"sqrt of negative value: {a}")
    if a < 2:
        return a

    x = 1 << ((a.bit_length() + 1) // 2)
    for _ in range(max_iterations):
        x_next = (x + a // x) >> 1
        if x_next >= x:
            break
        x = x_next
    else:
        raise NotConverged(f"sqrt did not converge after {max_iterations} iterations")

    while x * x > a:
        x -= 1
    while (x + 1) * (x + 1) <= a:
        x += 1
    return x
