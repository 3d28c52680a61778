"""Pair factory and registry.

PairFactory creates at most one PairEngine per token pair, records it, and
holds the protocol fee recipient every pair reads during its fee
checkpoint. Pair addresses are derived the way the on-chain factory does it
with CREATE2:

    address = keccak256(0xff ++ factory ++ keccak256(token_a ++ token_b) ++ init_code_hash)[12:]
"""

from __future__ import annotations

from collections.abc import Callable

import structlog
from eth_abi.packed import encode_packed
from eth_utils import keccak

from pairpool.config import DEFAULT_PAIR_CONFIG, PairConfig
from pairpool.constants import MAINNET_FACTORY, PAIR_INIT_CODE_HASH, ZERO_ADDRESS
from pairpool.errors import Forbidden, IdenticalAddresses, PairExists, ZeroAddress
from pairpool.interfaces import AssetToken
from pairpool.models.types import address_to_bytes, normalize_address, sort_tokens
from pairpool.pair.engine import PairEngine, system_clock

logger = structlog.get_logger()


def pair_address(
    token_x: str,
    token_y: str,
    factory: str = MAINNET_FACTORY,
    init_code_hash: bytes = PAIR_INIT_CODE_HASH,
) -> str:
    """Deterministic pair address for two tokens (order-insensitive).

    Raises:
        IdenticalAddresses: If both tokens are the same
        ZeroAddress: If either token is the zero address
    """
    token_a, token_b = _checked_sort(token_x, token_y)
    packed = encode_packed(
        ["address", "address"], [address_to_bytes(token_a), address_to_bytes(token_b)]
    )
    salt = keccak(packed)
    digest = keccak(b"\xff" + address_to_bytes(factory) + salt + init_code_hash)
    return "0x" + digest[12:].hex()


def _checked_sort(token_x: str, token_y: str) -> tuple[str, str]:
    token_a, token_b = sort_tokens(token_x, token_y)
    if token_a == token_b:
        raise IdenticalAddresses(f"identical tokens: {token_a}")
    if token_a == ZERO_ADDRESS:
        raise ZeroAddress("zero address cannot be a pair token")
    return token_a, token_b


class PairFactory:
    """Registry of pairs plus the protocol fee switch.

    Attributes:
        address: Factory address used for pair address derivation
        fee_to_setter: The only account allowed to change fee settings
    """

    def __init__(
        self,
        fee_to_setter: str,
        *,
        address: str = MAINNET_FACTORY,
        init_code_hash: bytes = PAIR_INIT_CODE_HASH,
        clock: Callable[[], int] = system_clock,
        config: PairConfig = DEFAULT_PAIR_CONFIG,
    ) -> None:
        self.address = normalize_address(address, validate=True)
        self.fee_to_setter = normalize_address(fee_to_setter, validate=True)
        self._init_code_hash = init_code_hash
        self._fee_to: str | None = None
        self._clock = clock
        self._config = config
        self._pairs: dict[tuple[str, str], PairEngine] = {}
        self._all_pairs: list[PairEngine] = []

    @property
    def fee_to(self) -> str | None:
        """Protocol fee recipient (None: fee off)."""
        return self._fee_to

    def set_fee_to(self, caller: str, fee_to: str | None) -> None:
        """Turn the protocol fee on (recipient) or off (None / zero address).

        Raises:
            Forbidden: If caller is not fee_to_setter
        """
        self._require_setter(caller)
        self._fee_to = normalize_address(fee_to, validate=True) if fee_to else None
        logger.info("fee_to_changed", fee_to=self._fee_to)

    def set_fee_to_setter(self, caller: str, fee_to_setter: str) -> None:
        """Hand fee control to another account.

        Raises:
            Forbidden: If caller is not fee_to_setter
        """
        self._require_setter(caller)
        self.fee_to_setter = normalize_address(fee_to_setter, validate=True)
        logger.info("fee_to_setter_changed", fee_to_setter=self.fee_to_setter)

    def _require_setter(self, caller: str) -> None:
        if normalize_address(caller) != self.fee_to_setter:
            raise Forbidden(f"{caller} is not the fee setter")

    def pair_for(self, token_x: str, token_y: str) -> str:
        """Address the pair for these tokens has (or will have)."""
        return pair_address(token_x, token_y, self.address, self._init_code_hash)

    def create_pair(self, token_x: AssetToken, token_y: AssetToken) -> PairEngine:
        """Create and register the pair for two tokens.

        Raises:
            IdenticalAddresses: If both tokens are the same
            ZeroAddress: If either token is the zero address
            PairExists: If the pair was already created
        """
        key = _checked_sort(token_x.address, token_y.address)
        if key in self._pairs:
            raise PairExists(f"pair for {key[0]}/{key[1]} already exists")

        pair = PairEngine(
            token_x,
            token_y,
            address=self.pair_for(*key),
            fee_source=self,
            clock=self._clock,
            config=self._config,
        )
        self._pairs[key] = pair
        self._all_pairs.append(pair)
        logger.info(
            "pair_created",
            token_a=key[0],
            token_b=key[1],
            pair=pair.address,
            index=len(self._all_pairs),
        )
        return pair

    def get_pair(self, token_x: str, token_y: str) -> PairEngine | None:
        """Look up a pair in either token order."""
        return self._pairs.get(sort_tokens(token_x, token_y))

    @property
    def all_pairs(self) -> list[PairEngine]:
        return list(self._all_pairs)

    def all_pairs_length(self) -> int:
        return len(self._all_pairs)
