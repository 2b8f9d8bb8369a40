from typing import Iterable, List

from models import Account, Outcome, ProcessingStats, TransactionRecord
from processor import TransactionProcessor
from state import LedgerState


class LedgerEngine:
    """
    Folds an ordered stream of transaction records into account state.

    apply() is called once per record in input order and never raises for
    a bad record: invalid ones come back as a non-APPLIED Outcome and
    leave state untouched. finalize() returns the accounts once the
    stream ends.
    """

    def __init__(self):
        self._state = LedgerState()
        self._processor = TransactionProcessor(self._state)
        self.stats = ProcessingStats()

    def apply(self, transaction: TransactionRecord) -> Outcome:
        outcome = self._processor.process_transaction(transaction)
        self.stats.record(outcome)
        return outcome

    def apply_all(self, transactions: Iterable[TransactionRecord]) -> "LedgerEngine":
        for transaction in transactions:
            self.apply(transaction)
        return self

    def finalize(self) -> List[Account]:
        """Return all accounts seen during the run, ordered by client id."""
        return sorted(self._state.get_all_accounts(), key=lambda account: account.client_id)
