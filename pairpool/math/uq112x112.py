"""UQ112x112 binary fixed-point numbers.

A UQ112x112 value is an unsigned 224-bit integer whose low 112 bits are the
fractional part. Encoding a 112-bit reserve and dividing it by another
112-bit reserve gives a spot price with 112 bits of precision over the full
reserve range, which is what the cumulative price accumulators integrate.

All values are plain Python ints; width checks raise UQ112x112Error.
"""

from __future__ import annotations

from pairpool.constants import Q112, UINT112_MAX, UINT224_MAX

__all__ = [
    # Errors
    "UQ112x112Error",
    # Functions
    "encode",
    "uqdiv",
    "decode",
    "mul_decode",
    "spot_price",
    "to_decimal_string",
    # Constants
    "RESOLUTION",
]

RESOLUTION = 112


class UQ112x112Error(ArithmeticError):
    """Operand outside the range UQ112x112 math is defined for."""

    pass


def encode(y: int) -> int:
    """Encode a uint112 as a UQ112x112 (y * 2**112).

    Raises:
        UQ112x112Error: If y is negative or wider than 112 bits
    """
    if y < 0 or y > UINT112_MAX:
        raise UQ112x112Error(f"encode operand does not fit uint112: {y}")
    return y * Q112


def uqdiv(x: int, y: int) -> int:
    """Divide a UQ112x112 by a uint112, returning a UQ112x112.

    Raises:
        UQ112x112Error: If y is zero or wider than 112 bits
    """
    if y <= 0 or y > UINT112_MAX:
        raise UQ112x112Error(f"uqdiv divisor must be a nonzero uint112: {y}")
    if x < 0 or x > UINT224_MAX:
        raise UQ112x112Error(f"uqdiv dividend does not fit uint224: {x}")
    return x // y


def decode(x: int) -> int:
    """Integer part of a UQ112x112 (floor)."""
    return x >> RESOLUTION


def mul_decode(x: int, amount: int) -> int:
    """Multiply a UQ112x112 price by an integer amount and floor to an integer."""
    return (x * amount) >> RESOLUTION


def spot_price(reserve_base: int, reserve_quote: int) -> int:
    """Quote-per-base spot price of two reserves as a UQ112x112.

    For reserves (a, b), spot_price(a, b) is the price of one unit of A
    denominated in B.
    """
    return uqdiv(encode(reserve_quote), reserve_base)


def to_decimal_string(x: int, places: int = 18) -> str:
    """Render a UQ112x112 as a decimal string truncated to `places` digits.

    Integer-only; intended for logs and API responses, never for math.
    """
    integer = x >> RESOLUTION
    fraction = ((x & (Q112 - 1)) * 10**places) >> RESOLUTION
    if places == 0:
        return str(integer)
    return f"{integer}.{fraction:0{places}d}"
