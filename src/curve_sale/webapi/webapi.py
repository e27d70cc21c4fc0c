import logging
from typing import Any, Dict, Optional

from flask import jsonify
from flask_openapi3 import Info, Tag
from flask_openapi3 import OpenAPI
from pydantic import BaseModel, Field

from curve_sale.common.config import EngineConfig
from curve_sale.common.errors import (
    CapacityError,
    CurveSaleError,
    LedgerInvariantError,
    PoolEndedError,
    PoolNotEndedError,
    PoolNotFoundError,
    ReentrancyError,
    UnauthorizedError,
)
from curve_sale.common.math import BASIS_POINTS
from curve_sale.common.model import TradeResult
from curve_sale.curves.registry import InMemoryRegistry
from curve_sale.pools.pool_ledger import PoolLedger
from curve_sale.pools.transfer import InMemoryTransferAdapter

log = logging.getLogger(__name__)

info = Info(title="Bonding Curve Sale API", version="1.0.0")

ERROR_STATUS = {
    PoolNotFoundError: 404,
    UnauthorizedError: 403,
    CapacityError: 409,
    PoolEndedError: 409,
    PoolNotEndedError: 409,
    ReentrancyError: 409,
    LedgerInvariantError: 500,
}


class PoolPath(BaseModel):
    pool_id: int = Field(description="Index of the pool")


class AmountQuery(BaseModel):
    amount: int = Field(ge=0, description="Payment (buy) or token (buy-need / sell) amount in smallest units")


class CreatePoolBody(BaseModel):
    caller: str = Field(description="Creator; becomes the pool owner")
    raising_token: str = Field(description="Payment asset identity")
    token: str = Field(description="Asset being sold")
    curve_type: str = Field(description="Registered curve type name, e.g. linear")
    sell_amount: int = Field(gt=0, description="Cap on tokens sold")
    end_time: int = Field(0, ge=0, description="0 ends on near sell-out, otherwise a unix timestamp")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Curve parameters")


class TradeBody(BaseModel):
    caller: str
    amount: int = Field(gt=0, description="Payment (buy), token count (buy-exact, sell)")
    value: int = Field(0, ge=0, description="Attached native currency")


class CallerBody(BaseModel):
    caller: str


class ChangeOwnerBody(BaseModel):
    caller: str
    new_owner: str


class ClaimFeeBody(BaseModel):
    caller: str
    raising_token: str


class TokenBody(BaseModel):
    token: str = Field(description="Token identity to make transferable")
    decimals: int = Field(18, ge=0, description="Smallest-unit decimals")
    transfer_fee_bps: int = Field(0, ge=0, lt=BASIS_POINTS, description="Cut burned on every transfer")


class MintBody(BaseModel):
    token: str
    holder: str
    amount: int = Field(gt=0)


class BalanceQuery(BaseModel):
    token: str
    holder: str


pool_tag = Tag(name="Pools", description="Create pools and read their state")
estimate_tag = Tag(name="Estimates", description="Read-only buy/sell projections over a pool's current state")
trade_tag = Tag(name="Trading", description="Buy from and sell back into a pool")
lifecycle_tag = Tag(name="Lifecycle", description="End pools, transfer ownership, claim platform fees")
custody_tag = Tag(name="Custody", description="Register and fund tokens on the in-memory transfer adapter")


def _trade_json(result: TradeResult) -> Dict[str, Any]:
    return {
        "side": str(result.side),
        "pool_id": result.pool_id,
        "token_amount": result.token_amount,
        "payment_amount": result.payment_amount,
        "fee": result.fee,
        "new_token_sold": result.new_token_sold,
        "timestamp": result.timestamp.isoformat(),
    }


def build_ledger(config: EngineConfig) -> PoolLedger:
    """A ledger wired to the in-memory registry and transfer adapter."""
    registry = InMemoryRegistry(config.treasury, config.buy_tax_bps, config.sell_tax_bps)
    return PoolLedger(registry, InMemoryTransferAdapter(config.custody_address), config=config)


def create_app(ledger: Optional[PoolLedger] = None, config: Optional[EngineConfig] = None) -> OpenAPI:
    """
    Builds the HTTP surface over a PoolLedger. Every public ledger operation is one endpoint.
    """
    config = config or EngineConfig()
    ledger = ledger or build_ledger(config)

    app = OpenAPI(__name__, info=info)
    app.config["POOL_LEDGER"] = ledger

    @app.errorhandler(CurveSaleError)
    def handle_ledger_error(exc: CurveSaleError):
        status = 400
        for error_type, code in ERROR_STATUS.items():
            if isinstance(exc, error_type):
                status = code
                break
        if status >= 500:
            log.error("Ledger failure: %s", exc)
        return jsonify({"error": type(exc).__name__, "message": str(exc)}), status

    @app.get("/pools", summary="List pools", tags=[pool_tag])
    def list_pools():
        return jsonify([pool.to_dict() for pool in ledger.pools])

    @app.get("/pools/<int:pool_id>", summary="Pool state", tags=[pool_tag])
    def get_pool(path: PoolPath):
        return jsonify(ledger.get_pool(path.pool_id).to_dict())

    @app.post("/pools", summary="Create pool", tags=[pool_tag])
    def create_pool(body: CreatePoolBody):
        index = ledger.create_pool(
            body.caller,
            body.raising_token,
            body.token,
            body.curve_type,
            body.sell_amount,
            end_time=body.end_time,
            parameters=body.parameters,
        )
        return jsonify({"pool_id": index}), 201

    @app.get("/pools/<int:pool_id>/estimate/buy", summary="Tokens for a payment", tags=[estimate_tag])
    def estimate_buy(path: PoolPath, query: AmountQuery):
        quote = ledger.estimate_buy(path.pool_id, query.amount)
        return jsonify({"tokens_received": quote.tokens_received, "fee": quote.fee})

    @app.get("/pools/<int:pool_id>/estimate/buy-need", summary="Payment for a token count", tags=[estimate_tag])
    def estimate_buy_need(path: PoolPath, query: AmountQuery):
        quote = ledger.estimate_buy_need(path.pool_id, query.amount)
        return jsonify({"amount_pay": quote.amount_pay, "fee": quote.fee})

    @app.get("/pools/<int:pool_id>/estimate/sell", summary="Proceeds for selling tokens", tags=[estimate_tag])
    def estimate_sell(path: PoolPath, query: AmountQuery):
        quote = ledger.estimate_sell(path.pool_id, query.amount)
        return jsonify({"return_amount": quote.return_amount, "fee": quote.fee})

    @app.post("/pools/<int:pool_id>/buy", summary="Buy with a payment", tags=[trade_tag])
    def buy(path: PoolPath, body: TradeBody):
        return jsonify(_trade_json(ledger.buy(path.pool_id, body.amount, body.caller, value=body.value)))

    @app.post("/pools/<int:pool_id>/buy-exact", summary="Buy a token count", tags=[trade_tag])
    def buy_exact(path: PoolPath, body: TradeBody):
        return jsonify(_trade_json(ledger.buy_exact(path.pool_id, body.amount, body.caller, value=body.value)))

    @app.post("/pools/<int:pool_id>/sell", summary="Sell tokens back", tags=[trade_tag])
    def sell(path: PoolPath, body: TradeBody):
        return jsonify(_trade_json(ledger.sell(path.pool_id, body.amount, body.caller)))

    @app.post("/pools/<int:pool_id>/end", summary="End pool and release proceeds", tags=[lifecycle_tag])
    def end_pool(path: PoolPath, body: CallerBody):
        return jsonify({"raising_amount": ledger.end_pool(path.pool_id, body.caller)})

    @app.post("/pools/<int:pool_id>/owner", summary="Transfer pool ownership", tags=[lifecycle_tag])
    def change_owner(path: PoolPath, body: ChangeOwnerBody):
        ledger.change_owner(path.pool_id, body.caller, body.new_owner)
        return jsonify(ledger.get_pool(path.pool_id).to_dict())

    @app.post("/fees/claim", summary="Claim platform fees", tags=[lifecycle_tag])
    def claim_platform_fee(body: ClaimFeeBody):
        return jsonify({"amount": ledger.claim_platform_fee(body.caller, body.raising_token)})

    if isinstance(ledger.transfers, InMemoryTransferAdapter):
        _add_custody_routes(app, ledger.transfers)

    return app


def _add_custody_routes(app: OpenAPI, transfers: InMemoryTransferAdapter):
    """Admin routes that seed the in-memory adapter, which otherwise only knows native currency."""

    @app.post("/tokens", summary="Register token", tags=[custody_tag])
    def register_token(body: TokenBody):
        transfers.register_token(body.token, decimals=body.decimals, transfer_fee_bps=body.transfer_fee_bps)
        log.info("Registered token %s (%s decimals)", body.token, body.decimals)
        return jsonify({"token": body.token, "decimals": body.decimals}), 201

    @app.post("/tokens/mint", summary="Credit a holder", tags=[custody_tag])
    def mint(body: MintBody):
        transfers.mint(body.token, body.holder, body.amount)
        return jsonify({"balance": transfers.balance_of(body.token, body.holder)})

    @app.get("/balances", summary="Holder balance", tags=[custody_tag])
    def balance(query: BalanceQuery):
        return jsonify({"balance": transfers.balance_of(query.token, query.holder)})


def main():
    config = EngineConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_app(config=config).run(debug=False)


if __name__ == "__main__":
    main()
