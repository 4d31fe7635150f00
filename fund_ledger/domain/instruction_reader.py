"""Instruction batch file reader.

This module turns a line-oriented batch source into a lazy sequence of validated
instruction records. It performs no database access.

Record layout (after one header line): `customer_id,operation,amount,isin,value_date`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from datetime import date
from decimal import Decimal

from .errors import MalformedRecordError
from .models import Instruction, InstructionRecord, TradeOperation

_DOMAIN_RECORD_DELIMITER = ","
_DOMAIN_RECORD_FIELD_NAMES = ("customer_id", "operation", "amount", "isin", "value_date")
_DOMAIN_AMOUNT_MAX_FRACTION_DIGITS = 8
_DOMAIN_AMOUNT_PATTERN = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")
_DOMAIN_VALUE_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def domain_read_instructions(lines: Iterable[bytes | str]) -> Iterator[InstructionRecord]:
    """Yield validated instruction records from a batch source.

    The first line is the header and is dropped. Whitespace-only lines are skipped.
    The generator fails at the first malformed record; records before it have
    already been yielded.

    Args:
        lines: Batch lines as bytes (UTF-8) or text, e.g. a binary file handle.

    Yields:
        InstructionRecord: Parsed instruction with its 1-based line number.

    Raises:
        MalformedRecordError: Raised when the header is missing or a record is invalid.
    """

    header_seen = False
    for line_number, raw_line in enumerate(lines, start=1):
        line_text = _domain_decode_line(raw_line, line_number)
        if not header_seen:
            header_seen = True
            continue
        if not line_text.strip():
            continue
        yield InstructionRecord(
            line_number=line_number,
            instruction=domain_parse_instruction_line(line_text, line_number),
        )

    if not header_seen:
        raise MalformedRecordError(line_number=1, reason="missing header line")


def domain_parse_instruction_line(line_text: str, line_number: int) -> Instruction:
    """Parse one non-header batch line into an instruction.

    Args:
        line_text: Decoded line text, with or without trailing newline.
        line_number: 1-based line number for error reporting.

    Returns:
        Instruction: Validated instruction.

    Raises:
        MalformedRecordError: Raised when any field is invalid.
    """

    fields = [field.strip() for field in line_text.rstrip("\r\n").split(_DOMAIN_RECORD_DELIMITER)]
    if len(fields) != len(_DOMAIN_RECORD_FIELD_NAMES):
        raise MalformedRecordError(
            line_number=line_number,
            reason=f"expected {len(_DOMAIN_RECORD_FIELD_NAMES)} fields, found {len(fields)}",
        )

    customer_id, operation_text, amount_text, isin, value_date_text = fields
    if not customer_id:
        raise MalformedRecordError(line_number=line_number, reason="customer_id must not be blank")
    if not isin:
        raise MalformedRecordError(line_number=line_number, reason="isin must not be blank")

    return Instruction(
        customer_id=customer_id,
        operation=_domain_parse_operation(operation_text, line_number),
        amount=_domain_parse_amount(amount_text, line_number),
        isin=isin,
        value_date=_domain_parse_value_date(value_date_text, line_number),
    )


def _domain_decode_line(raw_line: bytes | str, line_number: int) -> str:
    if isinstance(raw_line, str):
        return raw_line.lstrip("\ufeff") if line_number == 1 else raw_line
    try:
        return raw_line.decode("utf-8-sig" if line_number == 1 else "utf-8")
    except UnicodeDecodeError as error:
        raise MalformedRecordError(line_number=line_number, reason="line is not valid UTF-8") from error


def _domain_parse_operation(value: str, line_number: int) -> TradeOperation:
    # case-sensitive: `buy` is rejected
    try:
        return TradeOperation(value)
    except ValueError as error:
        raise MalformedRecordError(
            line_number=line_number,
            reason=f"operation must be BUY or SELL, got {value!r}",
        ) from error


def _domain_parse_amount(value: str, line_number: int) -> Decimal:
    """Parse a non-negative decimal amount with bounded fraction digits.

    Args:
        value: Amount text.
        line_number: 1-based line number for error reporting.

    Returns:
        Decimal: Parsed amount.

    Raises:
        MalformedRecordError: Raised when the amount is not a plain non-negative decimal
            with at most 8 fractional digits.
    """

    # plain ASCII digits only; `Decimal` alone also takes `1_000`, `1E+2` and `+5`
    if not _DOMAIN_AMOUNT_PATTERN.match(value):
        raise MalformedRecordError(line_number=line_number, reason=f"amount is not a decimal: {value!r}")
    amount = Decimal(value)

    if amount < 0:
        raise MalformedRecordError(line_number=line_number, reason=f"amount must not be negative: {value}")

    if -amount.as_tuple().exponent > _DOMAIN_AMOUNT_MAX_FRACTION_DIGITS:
        raise MalformedRecordError(
            line_number=line_number,
            reason=f"amount has more than {_DOMAIN_AMOUNT_MAX_FRACTION_DIGITS} fractional digits: {value}",
        )
    return amount


def _domain_parse_value_date(value: str, line_number: int) -> date:
    if not _DOMAIN_VALUE_DATE_PATTERN.match(value):
        raise MalformedRecordError(line_number=line_number, reason=f"value_date must be YYYY-MM-DD, got {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError as error:
        raise MalformedRecordError(line_number=line_number, reason=f"value_date is not a calendar date: {value}") from error
