"""Position read router for customer cash balances and fund holdings."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from fund_ledger.db import LedgerGatewayPort
from fund_ledger.domain import StoreFailureError


def api_create_position_router(gateway_factory: Callable[[], LedgerGatewayPort]) -> APIRouter:
    """Create router exposing derived ledger positions.

    Args:
        gateway_factory: Builds a fresh ledger gateway per request.

    Returns:
        APIRouter: Router exposing `/customers/...` read endpoints.

    Raises:
        ValueError: Raised when gateway_factory is invalid.
    """

    if gateway_factory is None:
        raise ValueError("gateway_factory must not be None")

    router = APIRouter(prefix="/customers", tags=["positions"])

    @router.get("/{customer_id}/cash-balance")
    def api_position_cash_balance(
        customer_id: str,
        as_of: date | None = Query(default=None),
    ) -> JSONResponse:
        """Return one customer's cash balance.

        Args:
            customer_id: Opaque customer identifier.
            as_of: Optional inclusive value-date bound.

        Returns:
            JSONResponse: Balance payload, 404 for an unknown customer or 503 when the store failed.
        """

        gateway = gateway_factory()
        try:
            with gateway.db_transaction_scope():
                if not gateway.db_customer_exists(customer_id=customer_id):
                    return _api_unknown_customer_response(customer_id)
                balance = gateway.db_cash_balance(customer_id=customer_id, as_of=as_of)
        except StoreFailureError as error:
            return _api_store_failure_response(error)

        payload = {
            "customer_id": customer_id,
            "as_of": as_of.isoformat() if as_of is not None else None,
            "cash_balance": str(balance),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/{customer_id}/holdings/{isin}")
    def api_position_unit_holding(
        customer_id: str,
        isin: str,
        as_of: date | None = Query(default=None),
    ) -> JSONResponse:
        """Return one customer's unit holding in one fund.

        Args:
            customer_id: Opaque customer identifier.
            isin: Fund identifier.
            as_of: Optional inclusive value-date bound.

        Returns:
            JSONResponse: Holding payload, 404 for an unknown customer or 503 when the store failed.
        """

        gateway = gateway_factory()
        try:
            with gateway.db_transaction_scope():
                if not gateway.db_customer_exists(customer_id=customer_id):
                    return _api_unknown_customer_response(customer_id)
                holding = gateway.db_unit_holding(customer_id=customer_id, isin=isin, as_of=as_of)
        except StoreFailureError as error:
            return _api_store_failure_response(error)

        payload = {
            "customer_id": customer_id,
            "isin": isin,
            "as_of": as_of.isoformat() if as_of is not None else None,
            "units": str(holding),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


def _api_unknown_customer_response(customer_id: str) -> JSONResponse:
    payload = {
        "status": "error",
        "code": "UnknownCustomer",
        "message": f"no customer found with id: {customer_id}",
    }
    return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)


def _api_store_failure_response(error: StoreFailureError) -> JSONResponse:
    payload = {
        "status": "error",
        "error_kind": error.error_kind,
        "message": f"{error.error_kind}: {error.error_context_text()}",
        "context": {key: str(value) for key, value in error.context.items()},
    }
    return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
