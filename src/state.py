from decimal import Decimal
from typing import Dict, List, Optional, Set

from models import Account, StoredDeposit


class LedgerState:
    """
    In-memory ledger state for one run (or one partition of a run).
    Stores client accounts, deposits kept for dispute lookups, and the ids
    already used by deposits and withdrawals.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self._deposits: Dict[int, StoredDeposit] = {}
        self._claimed_transaction_ids: Set[int] = set()

    def get_or_create_account(self, client_id: int) -> Account:
        """Get existing account or create a zeroed, unlocked one."""
        account = self._accounts.get(client_id)
        if account is None:
            account = Account(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def claim_transaction_id(self, transaction_id: int) -> bool:
        """Reserve a deposit/withdrawal id. Returns False if it was already taken."""
        if transaction_id in self._claimed_transaction_ids:
            return False
        self._claimed_transaction_ids.add(transaction_id)
        return True

    def store_deposit(self, transaction_id: int, client_id: int, amount: Decimal) -> None:
        """Keep a deposit for future dispute lookups."""
        self._deposits[transaction_id] = StoredDeposit(client_id=client_id, amount=amount)

    def get_deposit(self, transaction_id: int) -> Optional[StoredDeposit]:
        """Retrieve a stored deposit by id."""
        return self._deposits.get(transaction_id)

    def get_all_accounts(self) -> List[Account]:
        """Return all accounts in creation order."""
        return list(self._accounts.values())
