"""Typed domain models shared across runtime layers.

This module provides the data contracts for one trade instruction batch and the
health payload used by operational surfaces.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class TradeOperation(str, Enum):
    """Supported instruction operations.

    `BUY` carries a cash amount to invest; `SELL` carries a unit quantity to dispose.
    """

    BUY = "BUY"
    SELL = "SELL"


class InstructionState(str, Enum):
    """Lifecycle states for one instruction inside a batch.

    `POSTED` and `FAILED` are terminal.
    """

    RECEIVED = "received"
    VALIDATED = "validated"
    PRICED = "priced"
    POSTED = "posted"
    FAILED = "failed"


@dataclass(frozen=True)
class Instruction:
    """One customer-initiated trade instruction.

    Attributes:
        customer_id: Opaque customer identifier.
        operation: Trade operation.
        amount: Non-negative cash amount (BUY) or unit quantity (SELL).
        isin: Fund identifier.
        value_date: Settlement date, also the NAV lookup date.
    """

    customer_id: str
    operation: TradeOperation
    amount: Decimal
    isin: str
    value_date: date


@dataclass(frozen=True)
class InstructionRecord:
    """Parsed instruction together with its source position.

    Attributes:
        line_number: 1-based line number in the batch file (header is line 1).
        instruction: Parsed instruction payload.
    """

    line_number: int
    instruction: Instruction


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str
