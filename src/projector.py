import csv
from typing import Iterable, List, TextIO, Tuple

from amounts import format_amount
from models import Account

HEADER = ("client", "available", "held", "total", "locked")

Row = Tuple[str, str, str, str, str]


def project_accounts(accounts: Iterable[Account]) -> List[Row]:
    """Render accounts as output rows, ascending by client id."""
    return [
        (
            str(account.client_id),
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        )
        for account in sorted(accounts, key=lambda account: account.client_id)
    ]


def write_accounts(accounts: Iterable[Account], stream: TextIO) -> None:
    """Write the header and one row per account as CSV."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    writer.writerows(project_accounts(accounts))
