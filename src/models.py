import threading
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeStatus(Enum):
    CLEAN = "clean"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class LedgerEntry:
    """A deposit or withdrawal kept for later dispute lookups."""

    kind: TransactionType
    amount: Decimal
    status: DisputeStatus = DisputeStatus.CLEAN

    @property
    def is_deposit(self) -> bool:
        return self.kind == TransactionType.DEPOSIT

    def mark_disputed(self) -> None:
        self.status = DisputeStatus.DISPUTED

    def mark_resolved(self) -> None:
        self.status = DisputeStatus.CLEAN

    def mark_charged_back(self) -> None:
        self.status = DisputeStatus.CHARGED_BACK


@dataclass
class ClientLedger:
    client_id: int
    entries: Dict[int, LedgerEntry] = field(default_factory=dict)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self.entries

    def get_entry(self, transaction_id: int) -> Optional[LedgerEntry]:
        return self.entries.get(transaction_id)

    def record(self, transaction: Transaction) -> LedgerEntry:
        entry = LedgerEntry(kind=transaction.transaction_type, amount=transaction.amount)
        self.entries[transaction.transaction_id] = entry
        return entry


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
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

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def lock(self) -> None:
        self.locked = True


@dataclass
class ClientState:
    """Ledger and account for one client, always owned and mutated together."""

    ledger: ClientLedger
    account: ClientAccount

    @classmethod
    def open(cls, client_id: int) -> "ClientState":
        return cls(ledger=ClientLedger(client_id=client_id), account=ClientAccount(client_id=client_id))

    @property
    def client_id(self) -> int:
        return self.account.client_id


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.applied = 0
        self.ignored = 0

    def record(self, result: ProcessingResult) -> None:
        with self._lock:
            if result == ProcessingResult.APPLIED:
                self.applied += 1
            else:
                self.ignored += 1

    @property
    def total(self) -> int:
        return self.applied + self.ignored

    def __repr__(self) -> str:
        return f"ProcessingStats(applied={self.applied}, ignored={self.ignored})"
