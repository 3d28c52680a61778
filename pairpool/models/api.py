"""Pydantic models for the pair service API.

Integer amounts travel as decimal strings, like every uint on the wire.
"""

from pydantic import BaseModel, Field

from pairpool.models.types import Address, Uint256


class PairStateResponse(BaseModel):
    """Snapshot of a pair's recorded state."""

    address: Address
    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")
    reserve_a: Uint256 = Field(alias="reserveA")
    reserve_b: Uint256 = Field(alias="reserveB")
    block_timestamp_last: int = Field(alias="blockTimestampLast", ge=0)
    price_a_cumulative_last: Uint256 = Field(alias="priceACumulativeLast")
    price_b_cumulative_last: Uint256 = Field(alias="priceBCumulativeLast")
    k_last: Uint256 = Field(alias="kLast")
    total_supply: Uint256 = Field(alias="totalSupply")
    spot_price_a: str | None = Field(
        default=None,
        alias="spotPriceA",
        description="Token B per token A at current reserves (display only).",
    )

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    """Result of a swap quote at current reserves."""

    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class FlashTermsResponse(BaseModel):
    """Flash loan limit and fee for an asset."""

    asset: Address
    max_loan: Uint256 = Field(alias="maxLoan")
    amount: Uint256
    fee: Uint256

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Error body for rejected pair requests."""

    error: str
    detail: str
