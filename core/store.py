import logging
import threading
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class AccessStore:
    """In-memory snapshot guarded by one process-wide lock.

    ``transaction()`` hands out a deep copy of the state; the copy replaces
    the live state only after the storage write succeeded, so a failed write
    leaves memory exactly as it is on disk.
    """

    def __init__(self, storage):
        self.storage = storage
        self.lock = threading.RLock()
        self.state = storage.load_all()
        logger.info("✅ База данных загружена")

    @contextmanager
    def transaction(self):
        with self.lock:
            draft = self.state.model_copy(deep=True)
            yield draft
            self.storage.save_all(draft)
            self.state = draft

    def save_all(self):
        with self.lock:
            self.storage.save_all(self.state)
