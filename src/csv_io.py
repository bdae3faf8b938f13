import csv
import logging
from decimal import Context, Decimal, InvalidOperation, ROUND_DOWN, getcontext
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import Transaction, TransactionType, ClientAccount

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 65535
MAX_TRANSACTION_ID = 4294967295

OUTPUT_PRECISION = Decimal("0.0001")
OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]

AMOUNT_TYPES = {TransactionType.DEPOSIT, TransactionType.WITHDRAWAL}


class TransactionParseError(ValueError):
    """Raised when a CSV row cannot be turned into a Transaction."""


def _parse_id(value: str, name: str, maximum: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise TransactionParseError(f"invalid {name} {value!r}") from None
    if not 0 <= parsed <= maximum:
        raise TransactionParseError(f"{name} {parsed} out of range 0..{maximum}")
    return parsed


def _parse_amount(value: str) -> Decimal:
    """Parse an amount, truncated to 4 fractional digits."""
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise TransactionParseError(f"invalid amount {value!r}") from None
    if not amount.is_finite() or amount < 0:
        raise TransactionParseError(f"amount must be a non-negative number, got {value!r}")
    try:
        return amount.quantize(OUTPUT_PRECISION, rounding=ROUND_DOWN)
    except InvalidOperation:
        raise TransactionParseError(f"amount {value!r} has too many digits") from None


def parse_row(row: Dict[Optional[str], Optional[str]]) -> Transaction:
    """Parse a csv.DictReader row into a Transaction."""
    normalized = {
        key.strip().lower(): (value or "").strip()
        for key, value in row.items()
        if isinstance(key, str) and not isinstance(value, list)
    }

    try:
        transaction_type = TransactionType(normalized.get("type", "").lower())
    except ValueError:
        raise TransactionParseError(f"unknown transaction type {normalized.get('type')!r}") from None

    client_id = _parse_id(normalized.get("client", ""), "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(normalized.get("tx", ""), "tx", MAX_TRANSACTION_ID)

    amount = None
    if transaction_type in AMOUNT_TYPES:
        amount_str = normalized.get("amount", "")
        if not amount_str:
            raise TransactionParseError(f"{transaction_type.value} requires an amount")
        amount = _parse_amount(amount_str)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """Yield transactions from a CSV stream in arrival order, skipping malformed rows."""
    reader = csv.DictReader(stream, skipinitialspace=True)
    for row in reader:
        if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
            continue
        try:
            yield parse_row(row)
        except TransactionParseError as e:
            logger.warning(f"Skipping line {reader.line_num}: {e}")


def _wide_context(*values: Decimal) -> Context:
    # Room for the largest integer part, a carry and 4 fractional digits.
    digits = max(value.adjusted() for value in values) + 6
    return Context(prec=max(getcontext().prec, digits))


def _round_amount(value: Decimal) -> Decimal:
    return value.quantize(OUTPUT_PRECISION, context=_wide_context(value))


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly 4 fractional digits."""
    return f"{_round_amount(value):f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for account in accounts:
        available = _round_amount(account.available)
        held = _round_amount(account.held)
        # Printed total is the sum of the printed parts.
        total = _wide_context(available, held).add(available, held)
        writer.writerow([
            account.client_id,
            f"{available:f}",
            f"{held:f}",
            f"{total:f}",
            str(account.locked).lower(),
        ])
