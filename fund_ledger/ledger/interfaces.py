"""Typed interfaces for ledger-layer pricing and trade application."""

from datetime import date
from decimal import Decimal
from typing import Protocol

from fund_ledger.domain import Instruction


class PricingPort(Protocol):
    """Port definition for unit price resolution."""

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
        """


class TradeApplierPort(Protocol):
    """Port definition for applying one instruction inside an open ledger scope."""

    def ledger_apply(self, instruction: Instruction) -> None:
        """Validate, price and post one instruction.

        Args:
            instruction: Parsed instruction.

        Raises:
            LedgerBatchError: Raised when the instruction cannot be applied.
        """
