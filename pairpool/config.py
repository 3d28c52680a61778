"""Configuration for the pair engine and its service."""

from __future__ import annotations

import os
from dataclasses import dataclass

from pairpool.constants import (
    FEE_DENOMINATOR,
    FEE_NUMERATOR,
    MINIMUM_LIQUIDITY,
    PROTOCOL_FEE_DIVISOR,
    ZERO_ADDRESS,
)
from pairpool.models.types import normalize_address


@dataclass(frozen=True)
class PairConfig:
    """Economic parameters of a pair.

    Attributes:
        fee_numerator: Swap and flash-loan fee numerator (default: 3)
        fee_denominator: Fee denominator (default: 1000, so 0.3%)
        minimum_liquidity: Claim tokens locked on first deposit (default: 1000)
        protocol_fee_divisor: Fee recipient gets 1/(divisor+1) of sqrt(k)
            growth (default: 5, i.e. one sixth)
    """

    fee_numerator: int = FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    protocol_fee_divisor: int = PROTOCOL_FEE_DIVISOR

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive: {self.fee_denominator}")
        if not 0 <= self.fee_numerator < self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in [0, {self.fee_denominator}): {self.fee_numerator}"
            )
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity cannot be negative: {self.minimum_liquidity}")
        if self.protocol_fee_divisor <= 0:
            raise ValueError(
                f"protocol_fee_divisor must be positive: {self.protocol_fee_divisor}"
            )

    @property
    def fee_multiplier(self) -> int:
        """Share of input kept after the fee (997 for 0.3%)."""
        return self.fee_denominator - self.fee_numerator


# Default configuration instance
DEFAULT_PAIR_CONFIG = PairConfig()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class ServiceConfig:
    """HTTP service settings, read from PAIRPOOL_* environment variables."""

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    token_a: str = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
    token_b: str = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
    fee_to: str | None = None
    fee_to_setter: str = ZERO_ADDRESS

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Build a config from the environment.

        - PAIRPOOL_HOST: Host to bind to (default: 0.0.0.0)
        - PAIRPOOL_PORT: Port to bind to (default: 8000)
        - PAIRPOOL_DEBUG: Enable reload mode (default: false)
        - PAIRPOOL_TOKEN_A / PAIRPOOL_TOKEN_B: Pair assets (default: USDC / WETH)
        - PAIRPOOL_FEE_TO: Protocol fee recipient (default: unset, fee off)
        - PAIRPOOL_FEE_TO_SETTER: Account allowed to change fee_to (default: zero address)
        """
        fee_to = os.environ.get("PAIRPOOL_FEE_TO") or None
        return cls(
            host=os.environ.get("PAIRPOOL_HOST", cls.host),
            port=int(os.environ.get("PAIRPOOL_PORT", str(cls.port))),
            debug=_env_flag("PAIRPOOL_DEBUG"),
            token_a=normalize_address(
                os.environ.get("PAIRPOOL_TOKEN_A", cls.token_a), validate=True
            ),
            token_b=normalize_address(
                os.environ.get("PAIRPOOL_TOKEN_B", cls.token_b), validate=True
            ),
            fee_to=normalize_address(fee_to, validate=True) if fee_to else None,
            fee_to_setter=normalize_address(
                os.environ.get("PAIRPOOL_FEE_TO_SETTER", cls.fee_to_setter), validate=True
            ),
        )
