import logging
from typing import Optional

from models import (
    Transaction,
    TransactionType,
    ClientState,
    DisputeStatus,
    LedgerEntry,
    ProcessingResult,
    ProcessingStats,
)
from state_manager import LedgerStore

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to a LedgerStore one at a time.

    Every transaction either changes the client's state or is ignored; nothing
    is raised or returned to the caller. Caller must apply a client's
    transactions in arrival order, and from a single thread at a time.
    """

    def __init__(self, stats: Optional[ProcessingStats] = None):
        self.stats = stats if stats is not None else ProcessingStats()

    def apply(self, transaction: Transaction, store: LedgerStore) -> None:
        result = self._dispatch(transaction, store)
        self.stats.record(result)

    def _dispatch(self, transaction: Transaction, store: LedgerStore) -> ProcessingResult:
        if transaction.transaction_type == TransactionType.DEPOSIT:
            return self._handle_deposit(transaction, store)

        client = store.get_client(transaction.client_id)
        if client is None:
            logger.info(f"{transaction.transaction_type.value} tx {transaction.transaction_id}: client {transaction.client_id} has no open account, ignoring")
            return ProcessingResult.IGNORED

        match transaction.transaction_type:
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(client, transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(client, transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(client, transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(client, transaction)
            case _:
                return ProcessingResult.IGNORED

    def _handle_deposit(self, transaction: Transaction, store: LedgerStore) -> ProcessingResult:
        if not self._has_valid_amount(transaction):
            return ProcessingResult.IGNORED

        client = store.open_account(transaction.client_id)
        if client.account.locked:
            logger.info(f"Deposit tx {transaction.transaction_id}: account {transaction.client_id} is locked")
            return ProcessingResult.IGNORED

        if transaction.transaction_id in client.ledger:
            logger.info(f"Deposit tx {transaction.transaction_id}: already recorded, skipping duplicate")
            return ProcessingResult.IGNORED

        client.ledger.record(transaction)
        client.account.credit(transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, client: ClientState, transaction: Transaction) -> ProcessingResult:
        if not self._has_valid_amount(transaction):
            return ProcessingResult.IGNORED

        if client.account.locked:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: account {transaction.client_id} is locked")
            return ProcessingResult.IGNORED

        if transaction.transaction_id in client.ledger:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: already recorded, skipping duplicate")
            return ProcessingResult.IGNORED

        if client.account.available < transaction.amount:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: insufficient funds (available {client.account.available}, requested {transaction.amount})")
            return ProcessingResult.IGNORED

        client.ledger.record(transaction)
        client.account.debit(transaction.amount)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, client: ClientState, transaction: Transaction) -> ProcessingResult:
        entry = self._find_deposit(client, transaction)
        if entry is None:
            return ProcessingResult.IGNORED

        if entry.status != DisputeStatus.CLEAN:
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction is {entry.status.value}")
            return ProcessingResult.IGNORED

        entry.mark_disputed()
        client.account.hold(entry.amount)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, client: ClientState, transaction: Transaction) -> ProcessingResult:
        entry = self._find_disputed_deposit(client, transaction)
        if entry is None:
            return ProcessingResult.IGNORED

        entry.mark_resolved()
        client.account.release_hold(entry.amount)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, client: ClientState, transaction: Transaction) -> ProcessingResult:
        entry = self._find_disputed_deposit(client, transaction)
        if entry is None:
            return ProcessingResult.IGNORED

        entry.mark_charged_back()
        client.account.remove_held(entry.amount)
        client.account.lock()
        return ProcessingResult.APPLIED

    def _find_deposit(self, client: ClientState, transaction: Transaction) -> Optional[LedgerEntry]:
        entry = client.ledger.get_entry(transaction.transaction_id)

        if entry is None:
            logger.info(f"{transaction.transaction_type.value} for tx {transaction.transaction_id}: not found in ledger of client {transaction.client_id}")
            return None

        # TODO: Withdrawal disputes could be supported by tracking payout state and attempting to recall funds
        if not entry.is_deposit:
            logger.info(f"{transaction.transaction_type.value} for tx {transaction.transaction_id}: only deposits can be disputed (got {entry.kind.value})")
            return None

        return entry

    def _find_disputed_deposit(self, client: ClientState, transaction: Transaction) -> Optional[LedgerEntry]:
        entry = self._find_deposit(client, transaction)
        if entry is None:
            return None

        if entry.status != DisputeStatus.DISPUTED:
            logger.info(f"{transaction.transaction_type.value} for tx {transaction.transaction_id}: transaction is not disputed ({entry.status.value})")
            return None

        return entry

    @staticmethod
    def _has_valid_amount(transaction: Transaction) -> bool:
        amount = transaction.amount
        if amount is None or not amount.is_finite() or amount < 0:
            logger.info(f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return False
        return True
