"""NAV pricing service with a strict one-row-per-date contract."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import structlog

from fund_ledger.db import LedgerGatewayPort
from fund_ledger.domain import NavAmbiguousError, NavMissingError

from .interfaces import PricingPort

logger = structlog.get_logger(__name__)


class NavPricingService(PricingPort):
    """Resolve `(isin, value_date)` to a unit price through the ledger gateway.

    Duplicate NAV rows signal upstream corruption, so the service refuses to
    choose between them.
    """

    def __init__(self, gateway: LedgerGatewayPort):
        """Initialize pricing service.

        Args:
            gateway: Ledger gateway used for NAV reads.

        Raises:
            ValueError: Raised when gateway is None.
        """

        if gateway is None:
            raise ValueError("gateway must not be None")
        self._gateway = gateway

    def ledger_nav(self, isin: str, value_date: date) -> Decimal:
        """Resolve the unique NAV for one fund and date.

        Args:
            isin: Fund identifier.
            value_date: NAV lookup date.

        Returns:
            Decimal: Published NAV value.

        Raises:
            NavMissingError: Raised when no NAV row matches.
            NavAmbiguousError: Raised when more than one NAV row matches.
            StoreFailureError: Raised when the NAV read fails.
        """

        nav_values = self._gateway.db_nav_values(isin=isin, nav_date=value_date)
        if not nav_values:
            raise NavMissingError(isin=isin, value_date=value_date)
        if len(nav_values) > 1:
            logger.warning("nav_ambiguous", isin=isin, value_date=value_date.isoformat(), row_count=len(nav_values))
            raise NavAmbiguousError(isin=isin, value_date=value_date)
        return nav_values[0]
