import logging
import threading
from typing import Dict, Iterable, List

from models import Transaction, ClientAccount, ProcessingStats
from message_queue import InMemoryQueue, ClientBatch
from state_manager import LedgerStore, group_by_client
from transaction_processor import TransactionProcessor
from csv_io import read_transactions

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Groups transactions by client and applies each client's batch in order.

    With more than one worker, client batches are spread over worker threads
    through a queue. Clients never share state, so each batch is processed by
    exactly one worker and results match the sequential run.
    """

    def __init__(self, num_workers: int = 4):
        self._num_workers = num_workers
        self._store = LedgerStore()
        self._stats = ProcessingStats()
        self._processor = TransactionProcessor(self._stats)

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply transactions and return final account states keyed by client id."""
        batches = group_by_client(transactions)
        logger.info(f"Processing {len(batches)} client batches with {self._num_workers} workers")

        if self._num_workers <= 1:
            for client_id, client_transactions in batches.items():
                self._apply_batch(ClientBatch(client_id, client_transactions))
        else:
            self._process_parallel(batches)

        logger.info(f"Processing complete: {self._stats.applied} applied, {self._stats.ignored} ignored, {len(self._store)} open accounts")

        return {account.client_id: account for account in self._store.drain()}

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="") as f:
            return self.process(read_transactions(f))

    def _process_parallel(self, batches: Dict[int, List[Transaction]]) -> None:
        queue = InMemoryQueue()
        for client_id, client_transactions in batches.items():
            queue.publish_batch(ClientBatch(client_id, client_transactions))
        queue.shutdown()

        workers = []
        for _ in range(min(self._num_workers, max(len(batches), 1))):
            worker = threading.Thread(target=self._consume_batches, args=(queue,))
            worker.start()
            workers.append(worker)

        for worker in workers:
            worker.join()

    def _consume_batches(self, queue: InMemoryQueue) -> None:
        """Worker loop: pull client batches until the queue is drained."""
        while True:
            batch = queue.consume_batch()
            if batch is None:
                if queue.is_shutdown() and queue.is_empty():
                    break
                continue
            self._apply_batch(batch)

    def _apply_batch(self, batch: ClientBatch) -> None:
        for transaction in batch.transactions:
            self._processor.apply(transaction, self._store)
