"""Domain models, errors and parsing used across application layer boundaries."""

from .errors import (
    CommitFailedError,
    InsufficientCashError,
    InsufficientUnitsError,
    InvalidPriceError,
    LedgerBatchError,
    MalformedRecordError,
    NavAmbiguousError,
    NavMissingError,
    StoreFailureError,
    UnknownCustomerError,
)
from .instruction_reader import domain_read_instructions
from .models import HealthStatus, Instruction, InstructionRecord, InstructionState, TradeOperation
from .timeline import domain_build_instruction_event, domain_build_stage_event

__all__ = [
    "CommitFailedError",
    "HealthStatus",
    "Instruction",
    "InstructionRecord",
    "InstructionState",
    "InsufficientCashError",
    "InsufficientUnitsError",
    "InvalidPriceError",
    "LedgerBatchError",
    "MalformedRecordError",
    "NavAmbiguousError",
    "NavMissingError",
    "StoreFailureError",
    "TradeOperation",
    "UnknownCustomerError",
    "domain_build_instruction_event",
    "domain_build_stage_event",
    "domain_read_instructions",
]
