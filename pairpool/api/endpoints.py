"""API endpoints for the pair service."""

import structlog
from fastapi import APIRouter, Depends, Path, Query

from pairpool.math.uq112x112 import spot_price, to_decimal_string
from pairpool.models.api import FlashTermsResponse, PairStateResponse, QuoteResponse
from pairpool.models.types import normalize_address
from pairpool.pair.engine import PairEngine

logger = structlog.get_logger()

router = APIRouter(prefix="/pair")

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"

_default_engine: PairEngine | None = None


def set_default_engine(engine: PairEngine) -> None:
    """Install the engine served by get_engine()."""
    global _default_engine
    _default_engine = engine


def get_engine() -> PairEngine:
    """Dependency provider for the pair engine.

    Override this in tests to inject a prepared pair:
        app.dependency_overrides[get_engine] = lambda: engine

    Raises:
        RuntimeError: If no engine was installed
    """
    if _default_engine is None:
        raise RuntimeError("no pair engine configured")
    return _default_engine


def _state_response(engine: PairEngine) -> PairStateResponse:
    reserve_a, reserve_b, timestamp = engine.get_reserves()
    price = None
    if reserve_a and reserve_b:
        price = to_decimal_string(spot_price(reserve_a, reserve_b))
    return PairStateResponse(
        address=engine.address,
        token_a=engine.token_a.address,
        token_b=engine.token_b.address,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        block_timestamp_last=timestamp,
        price_a_cumulative_last=engine.price_a_cumulative_last,
        price_b_cumulative_last=engine.price_b_cumulative_last,
        k_last=engine.k_last,
        total_supply=engine.total_supply(),
        spot_price_a=price,
    )


@router.get("", response_model_exclude_none=True)
async def get_pair(engine: PairEngine = Depends(get_engine)) -> PairStateResponse:
    """Recorded reserves, accumulators and supply."""
    return _state_response(engine)


@router.get("/quote/amount-out")
async def quote_amount_out(
    token_in: str = Query(alias="tokenIn", pattern=ADDRESS_PATTERN),
    amount_in: int = Query(alias="amountIn", gt=0),
    engine: PairEngine = Depends(get_engine),
) -> QuoteResponse:
    """Output for an exact input at current reserves."""
    amount_out = engine.get_amount_out(token_in, amount_in)
    token = engine.token_for(token_in)
    token_out = engine.token_b if token is engine.token_a else engine.token_a
    return QuoteResponse(
        token_in=normalize_address(token_in),
        token_out=token_out.address,
        amount_in=amount_in,
        amount_out=amount_out,
    )


@router.get("/quote/amount-in")
async def quote_amount_in(
    token_out: str = Query(alias="tokenOut", pattern=ADDRESS_PATTERN),
    amount_out: int = Query(alias="amountOut", gt=0),
    engine: PairEngine = Depends(get_engine),
) -> QuoteResponse:
    """Input required for an exact output at current reserves."""
    amount_in = engine.get_amount_in(token_out, amount_out)
    token = engine.token_for(token_out)
    token_in = engine.token_b if token is engine.token_a else engine.token_a
    return QuoteResponse(
        token_in=token_in.address,
        token_out=normalize_address(token_out),
        amount_in=amount_in,
        amount_out=amount_out,
    )


@router.get("/flash/{asset}")
async def flash_terms(
    asset: str = Path(pattern=ADDRESS_PATTERN),
    amount: int = Query(default=0, ge=0),
    engine: PairEngine = Depends(get_engine),
) -> FlashTermsResponse:
    """Maximum flash loan for `asset` and the fee on `amount` (default: the maximum)."""
    max_loan = engine.max_loanable(asset)
    amount = amount or max_loan
    fee = engine.loan_fee(asset, amount)
    return FlashTermsResponse(
        asset=normalize_address(asset), max_loan=max_loan, amount=amount, fee=fee
    )


@router.post("/sync")
def sync(engine: PairEngine = Depends(get_engine)) -> PairStateResponse:
    """Force reserves to match balances."""
    engine.sync()
    logger.info("pair_synced_via_api", pair=engine.address)
    return _state_response(engine)
