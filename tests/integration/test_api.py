"""Integration tests for the pair HTTP service."""

import inspect

import pytest
from fastapi.testclient import TestClient

from pairpool.api import endpoints
from pairpool.api.endpoints import get_engine
from pairpool.api.main import app, build_engine
from pairpool.config import ServiceConfig
from tests.helpers import ALICE, DAI, FEE_SINK, SETTER, USDC, WETH, make_pair, provide


@pytest.fixture
def engine():
    """Pair with reserves (1_000_000, 2_000_000)."""
    _, pair = make_pair()
    provide(pair, ALICE, 1_000_000, 2_000_000)
    return pair


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class TestHealth:
    def test_health(self):
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestPairState:
    def test_get_pair(self, client, engine):
        response = client.get("/pair")
        assert response.status_code == 200
        body = response.json()
        assert body["address"] == engine.address
        assert (body["tokenA"], body["tokenB"]) == (USDC, WETH)
        assert (body["reserveA"], body["reserveB"]) == ("1000000", "2000000")
        assert body["totalSupply"] == str(engine.total_supply())
        assert body["spotPriceA"] == "2.000000000000000000"

    def test_empty_pair_has_no_price(self):
        _, empty = make_pair()
        app.dependency_overrides[get_engine] = lambda: empty
        try:
            body = TestClient(app).get("/pair").json()
        finally:
            app.dependency_overrides.clear()
        assert body["reserveA"] == "0"
        assert "spotPriceA" not in body

    def test_sync(self, client, engine):
        engine.token_a.mint(engine.address, 500)
        response = client.post("/pair/sync")
        assert response.status_code == 200
        assert response.json()["reserveA"] == "1000500"

    def test_sync_handler_is_blocking(self):
        """Taking the pair lock happens in the threadpool, off the event loop."""
        assert not inspect.iscoroutinefunction(endpoints.sync)


class TestQuotes:
    def test_amount_out(self, client):
        response = client.get("/pair/quote/amount-out", params={"tokenIn": USDC, "amountIn": 1000})
        assert response.status_code == 200
        assert response.json() == {
            "tokenIn": USDC,
            "tokenOut": WETH,
            "amountIn": "1000",
            "amountOut": "1992",
        }

    def test_amount_in(self, client):
        response = client.get("/pair/quote/amount-in", params={"tokenOut": WETH, "amountOut": 1992})
        assert response.status_code == 200
        assert response.json()["amountIn"] == "1000"
        assert response.json()["tokenIn"] == USDC

    def test_unknown_token_is_400(self, client):
        response = client.get("/pair/quote/amount-out", params={"tokenIn": DAI, "amountIn": 1})
        assert response.status_code == 400
        assert response.json()["error"] == "Forbidden"

    def test_excessive_output_is_400(self, client):
        response = client.get(
            "/pair/quote/amount-in", params={"tokenOut": WETH, "amountOut": 2_000_000}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientLiquidity"

    def test_malformed_address_is_422(self, client):
        response = client.get("/pair/quote/amount-out", params={"tokenIn": "0x12", "amountIn": 1})
        assert response.status_code == 422

    def test_zero_amount_is_422(self, client):
        response = client.get("/pair/quote/amount-out", params={"tokenIn": USDC, "amountIn": 0})
        assert response.status_code == 422


class TestFlashTerms:
    def test_defaults_to_max(self, client):
        response = client.get(f"/pair/flash/{WETH}")
        assert response.status_code == 200
        assert response.json() == {
            "asset": WETH,
            "maxLoan": "2000000",
            "amount": "2000000",
            "fee": "6000",
        }

    def test_explicit_amount(self, client):
        response = client.get(f"/pair/flash/{USDC}", params={"amount": 1000})
        assert response.json()["fee"] == "3"

    def test_unknown_asset_is_400(self, client):
        response = client.get(f"/pair/flash/{DAI}")
        assert response.status_code == 400
        assert response.json()["error"] == "Forbidden"


class TestBuildEngine:
    def test_fee_recipient_from_config(self):
        config = ServiceConfig(fee_to=FEE_SINK, fee_to_setter=SETTER)
        engine = build_engine(config)
        assert engine.fee_to() == FEE_SINK
        assert engine.get_reserves() == (0, 0, 0)
        assert engine.token_a.address == USDC
