import logging
import threading
from typing import Dict, Iterable, List, Set

from ledger import LedgerEngine
from message_queue import InMemoryQueue
from models import Account, Outcome, ProcessingStats, TransactionRecord
from records import read_records

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Runs a record stream through the ledger and returns final account states.

    With one worker the ledger is a plain sequential fold. With more, a
    publisher thread routes each record to the worker that owns its client
    (client_id % num_workers); every worker has its own queue and its own
    LedgerEngine, so per-client order is kept and nothing is shared.
    """

    def __init__(self, num_workers: int = 1, queue_timeout: float = InMemoryQueue.DEFAULT_TIMEOUT):
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")
        self._num_workers = num_workers
        self._queue_timeout = queue_timeout
        self.stats = ProcessingStats()

    def process_file(self, filepath: str) -> Dict[int, Account]:
        """Process a CSV file and return final account states keyed by client id."""
        with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
            return self.process_lines(f)

    def process_lines(self, lines: Iterable[str]) -> Dict[int, Account]:
        return self.process_records(read_records(lines, self.stats))

    def process_records(self, records: Iterable[TransactionRecord]) -> Dict[int, Account]:
        if self._num_workers == 1:
            accounts = self._process_sequential(records)
        else:
            accounts = self._process_partitioned(records)

        logger.info(f"Processing complete. {self.stats.summary()}")
        return {account.client_id: account for account in accounts}

    def _process_sequential(self, records: Iterable[TransactionRecord]) -> List[Account]:
        ledger = LedgerEngine().apply_all(records)
        self.stats.merge(ledger.stats)
        return ledger.finalize()

    def _process_partitioned(self, records: Iterable[TransactionRecord]) -> List[Account]:
        logger.info(f"Starting partitioned processing with {self._num_workers} workers")

        queues = [InMemoryQueue(timeout=self._queue_timeout) for _ in range(self._num_workers)]
        ledgers = [LedgerEngine() for _ in range(self._num_workers)]
        failures: List[Exception] = []

        publisher_thread = threading.Thread(target=self._publish_records, args=(records, queues, failures))
        publisher_thread.start()

        worker_threads = []
        for queue, ledger in zip(queues, ledgers):
            worker_thread = threading.Thread(target=self._consume_records, args=(queue, ledger, failures))
            worker_thread.start()
            worker_threads.append(worker_thread)

        publisher_thread.join()
        for worker_thread in worker_threads:
            worker_thread.join()

        if failures:
            raise failures[0]

        accounts = []
        for ledger in ledgers:
            self.stats.merge(ledger.stats)
            accounts.extend(ledger.finalize())
        return sorted(accounts, key=lambda account: account.client_id)

    def _publish_records(
        self, records: Iterable[TransactionRecord], queues: List[InMemoryQueue], failures: List[Exception]
    ) -> None:
        """
        Route records to partitions. Deposit/withdrawal ids are unique across
        all clients, so duplicates are dropped here before routing.
        """
        claimed_ids: Set[int] = set()
        try:
            for record in records:
                if record.transaction_type.moves_funds:
                    if record.transaction_id in claimed_ids:
                        logger.info(f"{record.transaction_type.value.capitalize()} tx {record.transaction_id}: id already used, skipping")
                        self.stats.record(Outcome.DUPLICATE_TRANSACTION)
                        continue
                    claimed_ids.add(record.transaction_id)
                queues[record.client_id % len(queues)].publish_message(record)
        except Exception as e:
            logger.error(f"Publisher stopped: {e}")
            failures.append(e)
        finally:
            for queue in queues:
                queue.shutdown()

    def _consume_records(self, queue: InMemoryQueue, ledger: LedgerEngine, failures: List[Exception]) -> None:
        """Worker loop: apply this partition's records in the order they were published."""
        try:
            while True:
                record = queue.consume_message()
                if record is None:
                    if queue.is_drained():
                        break
                    continue
                ledger.apply(record)
        except Exception as e:
            logger.error(f"Worker stopped: {e}")
            failures.append(e)
