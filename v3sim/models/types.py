"""Shared type definitions for pool snapshot models.

On-chain integers routinely exceed what JSON numbers can carry exactly, so
they may arrive as decimal strings, hex strings or ints. The annotated
types below accept all three and validate the width.
"""

from collections.abc import Callable
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from v3sim.constants import (
    INT128_MAX,
    INT128_MIN,
    MAX_TICK,
    MIN_TICK,
    UINT128_MAX,
    UINT160_MAX,
    UINT256_MAX,
)


def parse_int(value: Any) -> int:
    """Parse an integer from an int or a decimal/hex string.

    Raises:
        ValueError: If value is not an integer or integer string
    """
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool):
        raise ValueError(f"Expected integer, got bool: {value}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected integer or string, got {type(value).__name__}")

    text = value.strip()
    try:
        if text.lower().startswith(("0x", "-0x")):
            return int(text, 16)
        return int(text)
    except ValueError as err:
        raise ValueError(f"Not an integer string: '{value}'") from err


def bounded_int(name: str, minimum: int, maximum: int) -> Callable[[Any], int]:
    """Build a validator that parses an integer and checks its range."""

    def validate(value: Any) -> int:
        int_value = parse_int(value)
        if int_value < minimum:
            raise ValueError(f"{name} below minimum {minimum}: {int_value}")
        if int_value > maximum:
            raise ValueError(f"{name} overflow: {int_value} > {maximum}")
        return int_value

    validate.__name__ = f"validate_{name.lower()}"
    return validate


validate_uint256 = bounded_int("Uint256", 0, UINT256_MAX)
validate_uint160 = bounded_int("Uint160", 0, UINT160_MAX)
validate_uint128 = bounded_int("Uint128", 0, UINT128_MAX)
validate_int128 = bounded_int("Int128", INT128_MIN, INT128_MAX)
validate_tick = bounded_int("Tick", MIN_TICK, MAX_TICK)

# 256-bit unsigned integer (bitmap words)
Uint256 = Annotated[
    int,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as int or decimal/hex string"),
]

# Q64.96 sqrt price
Uint160 = Annotated[
    int,
    BeforeValidator(validate_uint160),
    Field(description="160-bit unsigned integer as int or decimal/hex string"),
]

# Liquidity
Uint128 = Annotated[
    int,
    BeforeValidator(validate_uint128),
    Field(description="128-bit unsigned integer as int or decimal/hex string"),
]

# Net liquidity
Int128 = Annotated[
    int,
    BeforeValidator(validate_int128),
    Field(description="128-bit signed integer as int or decimal string"),
]

Tick = Annotated[
    int,
    BeforeValidator(validate_tick),
    Field(description="Tick index in [MIN_TICK, MAX_TICK]"),
]

__all__ = [
    "parse_int",
    "bounded_int",
    "validate_uint256",
    "validate_uint160",
    "validate_uint128",
    "validate_int128",
    "validate_tick",
    "Uint256",
    "Uint160",
    "Uint128",
    "Int128",
    "Tick",
]
