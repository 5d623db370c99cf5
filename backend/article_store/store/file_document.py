"""
JSON document with serialized, all-or-nothing mutations.
"""
import copy
import json
import os
import tempfile
from typing import Any, Callable, Dict, Optional, TypeVar

from ..utils.logger import get_logger
from .errors import StoreError
from .file_queue import ExclusiveQueue, get_exclusive_queue

logger = get_logger('file_document')

T = TypeVar('T')


class JsonDocument:
    """One JSON file held in memory and persisted on every mutation.

    A mutation works on a deep copy of the state; the copy replaces the live
    state only after it has been written to disk, so a failed mutation or a
    failed write leaves both untouched.

    Args:
        path: File location
        sections: Top-level keys that always exist (each defaults to ``{}``)
        queue: Queue ordering the operations; the process-wide one by default
    """

    def __init__(self, path: str, sections, queue: Optional[ExclusiveQueue] = None):
        self.path = path
        self.sections = tuple(sections)
        self.queue = queue or get_exclusive_queue()
        self._state: Optional[Dict[str, Any]] = None

    def read(self, reader: Callable[[Dict[str, Any]], T]) -> T:
        """Run ``reader`` against the current state, in queue order."""
        return self.queue.run(lambda: reader(self._load()))

    def mutate(self, mutation: Callable[[Dict[str, Any]], T]) -> T:
        """Apply ``mutation`` and persist the result, in queue order."""
        def cycle():
            draft = copy.deepcopy(self._load())
            result = mutation(draft)
            self._persist(draft)
            self._state = draft
            return result

        return self.queue.run(cycle)

    def _load(self) -> Dict[str, Any]:
        if self._state is None:
            self._state = self._read_file()
        return self._state

    def _read_file(self) -> Dict[str, Any]:
        state: Dict[str, Any] = {}
        if os.path.exists(self.path):
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    state = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"[JsonDocument] Cannot load {self.path}: {e}")
                raise StoreError(f'Cannot load {self.path}: {e}') from e
            if not isinstance(state, dict):
                raise StoreError(f'{self.path} does not contain a JSON object')

        for section in self.sections:
            if not isinstance(state.get(section), dict):
                state[section] = {}
        return state

    def _persist(self, state: Dict[str, Any]) -> None:
        directory = os.path.dirname(self.path) or '.'
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tmp-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(state, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
