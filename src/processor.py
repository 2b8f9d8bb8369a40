import logging
from typing import Optional, Tuple

from models import Account, DisputeState, Outcome, StoredDeposit, TransactionRecord, TransactionType
from state import LedgerState

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transaction records against ledger state.
    Returns an Outcome for every record; anything other than APPLIED
    means the record was ignored and state is unchanged.
    """

    def __init__(self, state: LedgerState):
        self._state = state

    def process_transaction(self, transaction: TransactionRecord) -> Outcome:
        """
        Process a single record.

        Returns:
            APPLIED: Balances and/or dispute state changed
            DUPLICATE_TRANSACTION: Deposit/withdrawal id was already used
            LOCKED_ACCOUNT: Deposit/withdrawal against a locked account
            INSUFFICIENT_FUNDS: Withdrawal exceeds available funds
            UNKNOWN_TRANSACTION_REFERENCE: No deposit with that id for this client
            INVALID_STATE_TRANSITION: Referenced deposit is in the wrong dispute state
        """
        # A reused id is rejected before the record touches any account.
        if transaction.transaction_type.moves_funds and not self._state.claim_transaction_id(transaction.transaction_id):
            logger.info(
                f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id}: "
                f"id already used, skipping"
            )
            return Outcome.DUPLICATE_TRANSACTION

        account = self._state.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, transaction)

    def _handle_deposit(self, account: Account, transaction: TransactionRecord) -> Outcome:
        if account.locked:
            logger.debug(f"Deposit tx {transaction.transaction_id}: client {account.client_id} is locked")
            return Outcome.LOCKED_ACCOUNT

        account.credit(transaction.amount)
        self._state.store_deposit(transaction.transaction_id, transaction.client_id, transaction.amount)
        return Outcome.APPLIED

    def _handle_withdrawal(self, account: Account, transaction: TransactionRecord) -> Outcome:
        if account.locked:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: client {account.client_id} is locked")
            return Outcome.LOCKED_ACCOUNT

        if account.available < transaction.amount:
            logger.debug(
                f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
                f"(available {account.available}, requested {transaction.amount})"
            )
            return Outcome.INSUFFICIENT_FUNDS

        account.debit(transaction.amount)
        return Outcome.APPLIED

    def _handle_dispute(self, account: Account, transaction: TransactionRecord) -> Outcome:
        deposit, outcome = self._find_deposit(transaction, DisputeState.NORMAL)
        if deposit is None:
            return outcome

        account.hold(deposit.amount)
        deposit.state = DisputeState.DISPUTED
        return Outcome.APPLIED

    def _handle_resolve(self, account: Account, transaction: TransactionRecord) -> Outcome:
        deposit, outcome = self._find_deposit(transaction, DisputeState.DISPUTED)
        if deposit is None:
            return outcome

        account.release_hold(deposit.amount)
        deposit.state = DisputeState.RESOLVED
        return Outcome.APPLIED

    def _handle_chargeback(self, account: Account, transaction: TransactionRecord) -> Outcome:
        deposit, outcome = self._find_deposit(transaction, DisputeState.DISPUTED)
        if deposit is None:
            return outcome

        account.charge_back(deposit.amount)
        deposit.state = DisputeState.CHARGED_BACK
        return Outcome.APPLIED

    def _find_deposit(
        self, transaction: TransactionRecord, required_state: DisputeState
    ) -> Tuple[Optional[StoredDeposit], Outcome]:
        """Look up the deposit a dispute-family record refers to and check its state."""
        kind = transaction.transaction_type.value.capitalize()
        deposit = self._state.get_deposit(transaction.transaction_id)

        # Withdrawals are never stored, so disputing one lands here too.
        if deposit is None:
            logger.debug(f"{kind} for tx {transaction.transaction_id}: no such deposit")
            return None, Outcome.UNKNOWN_TRANSACTION_REFERENCE

        if deposit.client_id != transaction.client_id:
            logger.warning(
                f"{kind} for tx {transaction.transaction_id}: client mismatch "
                f"(deposit belongs to {deposit.client_id}, got {transaction.client_id})"
            )
            return None, Outcome.UNKNOWN_TRANSACTION_REFERENCE

        if deposit.state != required_state:
            logger.debug(
                f"{kind} for tx {transaction.transaction_id}: deposit is {deposit.state.value}, "
                f"expected {required_state.value}"
            )
            return None, Outcome.INVALID_STATE_TRANSITION

        return deposit, Outcome.APPLIED
