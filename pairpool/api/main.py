"""FastAPI application serving one pair.

The served pair is built from PAIRPOOL_* environment variables at startup
(see ServiceConfig). Pair errors map to 400 responses with the error name.
"""

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pairpool.api.endpoints import router, set_default_engine
from pairpool.config import ServiceConfig
from pairpool.errors import PairError
from pairpool.factory import PairFactory
from pairpool.ledger.asset import Erc20Token
from pairpool.models.api import ErrorResponse
from pairpool.pair.engine import PairEngine

CONFIG = ServiceConfig.from_env()


def build_engine(config: ServiceConfig) -> PairEngine:
    """Create an empty pair for the configured tokens."""
    factory = PairFactory(fee_to_setter=config.fee_to_setter)
    if config.fee_to:
        factory.set_fee_to(config.fee_to_setter, config.fee_to)
    return factory.create_pair(Erc20Token(config.token_a), Erc20Token(config.token_b))


app = FastAPI(
    title="pairpool",
    description="Constant-product two-asset pair engine",
    version="0.1.0",
)


@app.exception_handler(PairError)
async def pair_error_handler(_request: Request, exc: PairError) -> JSONResponse:
    """Report engine rejections as 400 with the error kind."""
    body = ErrorResponse(error=type(exc).__name__, detail=str(exc))
    return JSONResponse(status_code=400, content=body.model_dump())


app.include_router(router)
set_default_engine(build_engine(CONFIG))


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the pair API server.

    Configuration via environment variables:
    - PAIRPOOL_HOST: Host to bind to (default: 0.0.0.0)
    - PAIRPOOL_PORT: Port to bind to (default: 8000)
    - PAIRPOOL_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "pairpool.api.main:app",
        host=CONFIG.host,
        port=CONFIG.port,
        reload=CONFIG.debug,
    )


if __name__ == "__main__":
    run()
