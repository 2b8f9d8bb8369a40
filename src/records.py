import csv
import logging
from typing import Dict, Iterable, Iterator, Optional

from amounts import parse_amount
from models import ProcessingStats, TransactionRecord, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class MalformedRecordError(ValueError):
    """A row that cannot be turned into a TransactionRecord. Skipped, never fatal."""


class RecordSourceError(Exception):
    """The input stream itself cannot be read any further."""


def parse_row(row: Dict[Optional[str], Optional[str]]) -> TransactionRecord:
    """Parse a CSV row (header names already normalized) into a TransactionRecord."""
    type_str = _field(row, "type").lower()
    try:
        transaction_type = TransactionType(type_str)
    except ValueError:
        raise MalformedRecordError(f"unknown transaction type {type_str!r}") from None

    client_id = _parse_id(_field(row, "client"), "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(_field(row, "tx"), "tx", MAX_TRANSACTION_ID)

    amount = None
    if transaction_type.moves_funds:
        amount_str = _field(row, "amount")
        if not amount_str:
            raise MalformedRecordError(f"{type_str} tx {transaction_id} is missing an amount")
        try:
            amount = parse_amount(amount_str)
        except ValueError as e:
            raise MalformedRecordError(str(e)) from None

    return TransactionRecord(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def read_records(lines: Iterable[str], stats: Optional[ProcessingStats] = None) -> Iterator[TransactionRecord]:
    """
    Yield records from CSV text in input order.

    Malformed rows are logged, counted in stats and skipped. A stream the
    csv module cannot decode any further raises RecordSourceError.
    """
    reader = csv.DictReader(lines)
    try:
        if reader.fieldnames:
            reader.fieldnames = [name.strip().lower() for name in reader.fieldnames]

        for row in reader:
            if _is_blank(row):
                continue
            try:
                yield parse_row(row)
            except MalformedRecordError as e:
                logger.warning(f"Skipping malformed row at line {reader.line_num}: {e}")
                if stats is not None:
                    stats.record_malformed()
    except (csv.Error, UnicodeDecodeError) as e:
        raise RecordSourceError(f"cannot read input past line {reader.line_num}: {e}") from e


def _field(row: Dict[Optional[str], Optional[str]], name: str) -> str:
    value = row.get(name)
    if value is None:
        return ""
    return value.strip()


def _parse_id(text: str, name: str, maximum: int) -> int:
    if not (text.isascii() and text.isdigit()):
        raise MalformedRecordError(f"{name} must be an unsigned integer, got {text!r}")
    value = int(text)
    if value > maximum:
        raise MalformedRecordError(f"{name} {value} is out of range (max {maximum})")
    return value


def _is_blank(row: Dict[Optional[str], Optional[str]]) -> bool:
    return all(not value.strip() for key, value in row.items() if key is not None and value is not None)
