"""
Exclusive Queue - run file-store operations one at a time

Every load/mutate/persist cycle of the JSON-file stores is submitted to a
single-worker thread pool, so operations execute strictly in submission
order and never interleave. Callers block until their operation finishes and
get its return value or its exception.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, TypeVar

from ..utils.logger import get_logger

logger = get_logger('file_queue')

T = TypeVar('T')


class ExclusiveQueue:
    """Single-flight operation queue.

    Singleton pattern ensures every file store in the process shares one
    queue, which gives a total order across both JSON documents.

    Example:
        >>> queue = get_exclusive_queue()
        >>> queue.run(lambda: 21 * 2)
        42
        >>> queue.get_stats()
        {'submitted': 1, 'completed': 1, 'failed': 0}
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='file_store')
        self._local = threading.local()
        self._stats = {'submitted': 0, 'completed': 0, 'failed': 0}
        self._stats_lock = threading.Lock()
        self._initialized = True
        logger.info("[ExclusiveQueue] Initialized")

    def run(self, operation: Callable[[], T]) -> T:
        """Run ``operation`` after every previously submitted one.

        An operation that itself calls ``run`` executes inline; waiting on the
        worker from the worker would deadlock.
        """
        if getattr(self._local, 'active', False):
            return operation()

        with self._stats_lock:
            self._stats['submitted'] += 1
        future = self._executor.submit(self._execute, operation)
        return future.result()

    def _execute(self, operation: Callable[[], T]) -> T:
        self._local.active = True
        try:
            result = operation()
        except Exception:
            with self._stats_lock:
                self._stats['failed'] += 1
            raise
        finally:
            self._local.active = False
        with self._stats_lock:
            self._stats['completed'] += 1
        return result

    def get_stats(self) -> Dict[str, int]:
        with self._stats_lock:
            return dict(self._stats)


# Global singleton instance
_exclusive_queue: ExclusiveQueue = None


def get_exclusive_queue() -> ExclusiveQueue:
    """Get the process-wide exclusive queue (singleton pattern)."""
    global _exclusive_queue
    if _exclusive_queue is None:
        _exclusive_queue = ExclusiveQueue()
    return _exclusive_queue
