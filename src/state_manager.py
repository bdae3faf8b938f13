import threading
from typing import Dict, Iterable, List, Optional

from models import Transaction, ClientAccount, ClientState


def group_by_client(transactions: Iterable[Transaction]) -> Dict[int, List[Transaction]]:
    """
    Partition transactions by client id.
    Each client's list keeps the arrival order of its transactions.
    """
    batches: Dict[int, List[Transaction]] = {}
    for transaction in transactions:
        batches.setdefault(transaction.client_id, []).append(transaction)
    return batches


class LedgerStore:
    """
    Maps client ids to their ledger and account.
    A client is only present once an account has been opened by a deposit.
    """

    def __init__(self):
        self._clients: Dict[int, ClientState] = {}

        # Protects insertion of new clients. Each client's state is owned by a
        # single worker, so mutations of an existing entry need no locking.
        self._global_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._clients)

    def get_client(self, client_id: int) -> Optional[ClientState]:
        """Return the client's state, or None if no account is open."""
        return self._clients.get(client_id)

    def open_account(self, client_id: int) -> ClientState:
        """Get existing client state or open a new, empty account."""
        with self._global_lock:
            if client_id not in self._clients:
                self._clients[client_id] = ClientState.open(client_id)
            return self._clients[client_id]

    def drain(self) -> List[ClientAccount]:
        """Remove every client and return their accounts ordered by client id."""
        with self._global_lock:
            clients, self._clients = self._clients, {}
        return [clients[client_id].account for client_id in sorted(clients)]
