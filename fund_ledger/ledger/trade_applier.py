"""Per-instruction trade application: validate, price and post ledger rows.

Every validation read runs before the first write, so a failing instruction
leaves no rows behind even before the enclosing scope rolls back.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import Decimal

import structlog

from fund_ledger.db import LedgerGatewayPort
from fund_ledger.domain import (
    Instruction,
    InstructionState,
    InsufficientCashError,
    InsufficientUnitsError,
    InvalidPriceError,
    LedgerBatchError,
    TradeOperation,
    UnknownCustomerError,
)

from .interfaces import PricingPort, TradeApplierPort

logger = structlog.get_logger(__name__)

LEDGER_MIN_DIVISION_SCALE = 8
LEDGER_SUPPORTED_ROUNDING_MODES = frozenset(
    {
        decimal.ROUND_HALF_EVEN,
        decimal.ROUND_HALF_UP,
        decimal.ROUND_HALF_DOWN,
        decimal.ROUND_UP,
        decimal.ROUND_DOWN,
        decimal.ROUND_CEILING,
        decimal.ROUND_FLOOR,
        decimal.ROUND_05UP,
    }
)
_LEDGER_ARITHMETIC_PRECISION = 60


@dataclass(frozen=True)
class TradeApplierConfig:
    """Decimal discipline for unit and proceeds computation.

    Attributes:
        division_scale: Fractional digits kept for computed units and proceeds.
        rounding_mode: `decimal` rounding constant name applied at that scale.
    """

    division_scale: int = LEDGER_MIN_DIVISION_SCALE
    rounding_mode: str = decimal.ROUND_HALF_EVEN


class TradeApplier(TradeApplierPort):
    """Apply BUY and SELL instructions against the ledger gateway."""

    def __init__(
        self,
        gateway: LedgerGatewayPort,
        pricing_service: PricingPort,
        config: TradeApplierConfig | None = None,
    ):
        """Initialize trade applier dependencies.

        Args:
            gateway: Ledger gateway with an open scope at apply time.
            pricing_service: NAV pricing service.
            config: Optional decimal configuration; defaults to scale 8, half-even.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if gateway is None:
            raise ValueError("gateway must not be None")
        if pricing_service is None:
            raise ValueError("pricing_service must not be None")

        resolved_config = config or TradeApplierConfig()
        if resolved_config.division_scale < LEDGER_MIN_DIVISION_SCALE:
            raise ValueError(f"config.division_scale must be >= {LEDGER_MIN_DIVISION_SCALE}")
        if resolved_config.rounding_mode not in LEDGER_SUPPORTED_ROUNDING_MODES:
            raise ValueError(f"unsupported config.rounding_mode={resolved_config.rounding_mode}")

        self._gateway = gateway
        self._pricing_service = pricing_service
        self._config = resolved_config
        self._quantum = Decimal(1).scaleb(-resolved_config.division_scale)

    def ledger_apply(self, instruction: Instruction) -> None:
        """Validate, price and post one instruction.

        Args:
            instruction: Parsed instruction.

        Raises:
            UnknownCustomerError: Raised when the customer does not exist.
            NavMissingError: Raised when no NAV is published for the value date.
            NavAmbiguousError: Raised when several NAVs are published for the value date.
            InvalidPriceError: Raised when the NAV is not strictly positive.
            InsufficientCashError: Raised when a BUY exceeds the cash balance.
            InsufficientUnitsError: Raised when a SELL exceeds the unit holding.
            StoreFailureError: Raised when a gateway operation fails.
        """

        bound_logger = logger.bind(
            customer_id=instruction.customer_id,
            operation=instruction.operation.value,
            isin=instruction.isin,
            value_date=instruction.value_date.isoformat(),
        )
        bound_logger.debug("instruction_state", state=InstructionState.RECEIVED.value)
        try:
            if instruction.operation is TradeOperation.BUY:
                self._ledger_apply_buy(instruction, bound_logger)
            else:
                self._ledger_apply_sell(instruction, bound_logger)
        except LedgerBatchError as error:
            bound_logger.info("instruction_state", state=InstructionState.FAILED.value, error_kind=error.error_kind)
            raise
        bound_logger.debug("instruction_state", state=InstructionState.POSTED.value)

    def ledger_compute_units(self, amount: Decimal, price: Decimal) -> Decimal:
        """Compute units bought for a cash amount.

        Args:
            amount: Cash amount.
            price: Strictly positive unit price.

        Returns:
            Decimal: `amount / price` at the configured scale and rounding.
        """

        with decimal.localcontext() as context:
            context.prec = _LEDGER_ARITHMETIC_PRECISION
            return (amount / price).quantize(self._quantum, rounding=self._config.rounding_mode)

    def ledger_compute_proceeds(self, units: Decimal, price: Decimal) -> Decimal:
        """Compute cash proceeds for a unit quantity.

        Args:
            units: Units disposed.
            price: Unit price.

        Returns:
            Decimal: `units * price` at the configured scale and rounding.
        """

        with decimal.localcontext() as context:
            context.prec = _LEDGER_ARITHMETIC_PRECISION
            return (units * price).quantize(self._quantum, rounding=self._config.rounding_mode)

    def _ledger_apply_buy(self, instruction: Instruction, bound_logger) -> None:
        price = self._ledger_validate_and_price(instruction, bound_logger)

        cash_balance = self._gateway.db_cash_balance(customer_id=instruction.customer_id)
        if cash_balance < instruction.amount:
            raise InsufficientCashError(
                customer_id=instruction.customer_id,
                requested=instruction.amount,
                available=cash_balance,
            )

        units = self.ledger_compute_units(amount=instruction.amount, price=price)
        self._gateway.db_append_cash(
            customer_id=instruction.customer_id,
            value_date=instruction.value_date,
            amount=-instruction.amount,
        )
        self._gateway.db_append_units(
            customer_id=instruction.customer_id,
            isin=instruction.isin,
            value_date=instruction.value_date,
            units=units,
        )
        bound_logger.info("instruction_posted", cash_delta=str(-instruction.amount), unit_delta=str(units))

    def _ledger_apply_sell(self, instruction: Instruction, bound_logger) -> None:
        price = self._ledger_validate_and_price(instruction, bound_logger)

        holding = self._gateway.db_unit_holding(customer_id=instruction.customer_id, isin=instruction.isin)
        if holding < instruction.amount:
            raise InsufficientUnitsError(
                customer_id=instruction.customer_id,
                isin=instruction.isin,
                requested=instruction.amount,
                available=holding,
            )

        proceeds = self.ledger_compute_proceeds(units=instruction.amount, price=price)
        self._gateway.db_append_units(
            customer_id=instruction.customer_id,
            isin=instruction.isin,
            value_date=instruction.value_date,
            units=-instruction.amount,
        )
        self._gateway.db_append_cash(
            customer_id=instruction.customer_id,
            value_date=instruction.value_date,
            amount=proceeds,
        )
        bound_logger.info("instruction_posted", cash_delta=str(proceeds), unit_delta=str(-instruction.amount))

    def _ledger_validate_and_price(self, instruction: Instruction, bound_logger) -> Decimal:
        """Run the customer and pricing checks shared by BUY and SELL.

        Args:
            instruction: Instruction being applied.
            bound_logger: Logger bound to the instruction context.

        Returns:
            Decimal: Strictly positive unit price.

        Raises:
            UnknownCustomerError: Raised when the customer does not exist.
            InvalidPriceError: Raised when the NAV is zero or negative.
        """

        if not self._gateway.db_customer_exists(customer_id=instruction.customer_id):
            raise UnknownCustomerError(customer_id=instruction.customer_id)
        bound_logger.debug("instruction_state", state=InstructionState.VALIDATED.value)

        price = self._pricing_service.ledger_nav(isin=instruction.isin, value_date=instruction.value_date)
        if price <= 0:
            raise InvalidPriceError(isin=instruction.isin, value_date=instruction.value_date, price=price)
        bound_logger.debug("instruction_state", state=InstructionState.PRICED.value, price=str(price))
        return price
