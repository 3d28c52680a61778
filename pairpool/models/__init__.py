"""Pydantic models for pair events and the service API."""

from pairpool.models.events import Burn, FlashLoan, Mint, PairEvent, Skim, Swap, Sync
from pairpool.models.types import Address, Uint256, normalize_address

__all__ = [
    # Events
    "Sync",
    "Mint",
    "Burn",
    "Swap",
    "Skim",
    "FlashLoan",
    "PairEvent",
    # Types
    "Address",
    "Uint256",
    "normalize_address",
]
