import sys
import logging
from typing import List, Optional

from pydantic import ValidationError

from engine import PaymentsEngine
from projector import write_accounts
from records import RecordSourceError
from settings import get_settings


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: ledger <transactions.csv>", file=sys.stderr)
        return 1

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"error: invalid LEDGER_* configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    filepath = args[0]
    engine = PaymentsEngine(num_workers=settings.workers, queue_timeout=settings.queue_timeout)
    try:
        accounts = engine.process_file(filepath)
    except (OSError, RecordSourceError) as e:
        print(f"error: cannot process {filepath}: {e}", file=sys.stderr)
        return 1

    try:
        write_accounts(accounts.values(), sys.stdout)
        sys.stdout.flush()
    except OSError as e:
        print(f"error: cannot write output: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
