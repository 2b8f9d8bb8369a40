from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from amounts import ZERO


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def moves_funds(self) -> bool:
        """Deposits and withdrawals carry an amount and a unique tx id."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"

    @property
    def is_terminal(self) -> bool:
        return self in (DisputeState.RESOLVED, DisputeState.CHARGED_BACK)


class Outcome(Enum):
    APPLIED = "applied"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_TRANSACTION_REFERENCE = "unknown_transaction_reference"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    LOCKED_ACCOUNT = "locked_account"


@dataclass(frozen=True)
class TransactionRecord:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.transaction_type.moves_funds:
            if self.amount is None:
                raise ValueError(f"{self.transaction_type.value} tx {self.transaction_id} requires an amount")
            if self.amount < 0:
                raise ValueError(f"{self.transaction_type.value} tx {self.transaction_id} has negative amount {self.amount}")
        elif self.amount is not None:
            raise ValueError(f"{self.transaction_type.value} tx {self.transaction_id} must not carry an amount")

    def __repr__(self) -> str:
        return f"TransactionRecord({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredDeposit:
    """A deposit kept for later dispute lookups, with its dispute lifecycle state."""

    client_id: int
    amount: Decimal
    state: DisputeState = DisputeState.NORMAL


@dataclass
class Account:
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def charge_back(self, amount: Decimal) -> None:
        self.held -= amount
        self.locked = True


class ProcessingStats:
    """Per-outcome record counters, mergeable across partitions."""

    def __init__(self):
        self.outcomes: Counter = Counter()
        self.malformed = 0

    def record(self, outcome: Outcome) -> None:
        self.outcomes[outcome] += 1

    def record_malformed(self) -> None:
        self.malformed += 1

    def merge(self, other: "ProcessingStats") -> None:
        self.outcomes.update(other.outcomes)
        self.malformed += other.malformed

    @property
    def applied(self) -> int:
        return self.outcomes[Outcome.APPLIED]

    @property
    def ignored(self) -> int:
        return sum(count for outcome, count in self.outcomes.items() if outcome != Outcome.APPLIED)

    def summary(self) -> str:
        parts = [f"Applied: {self.applied}", f"Ignored: {self.ignored}", f"Malformed: {self.malformed}"]
        for outcome in Outcome:
            if outcome != Outcome.APPLIED and self.outcomes[outcome]:
                parts.append(f"{outcome.value}: {self.outcomes[outcome]}")
        return ", ".join(parts)
