"""Mathematical utilities for the pair engine.

This package provides fixed-point primitives for price accumulation:
- uq112x112: binary fixed-point with 112 fractional bits
"""

from pairpool.math.uq112x112 import decode, encode, spot_price, uqdiv

__all__ = ["encode", "uqdiv", "decode", "spot_price"]
