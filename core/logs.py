import uuid

from core.schemas import LogEntry


class LogStore:
    """Кольцевой буфер событий сайта: при переполнении остаются последние ``retain`` записей."""

    def __init__(self, store, clock, capacity=1000, retain=None):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.store = store
        self.clock = clock
        self.capacity = capacity
        self.retain = min(retain or capacity, capacity)

    def add_log(self, event_type, user_id=None, data=None) -> LogEntry:
        log = LogEntry(
            id=uuid.uuid4().hex,
            event_type=event_type,
            user_id=user_id,
            data=data or {},
            timestamp=self.clock.now(),
        )
        with self.store.transaction() as state:
            logs = state.logs.logs
            logs.append(log)
            if len(logs) > self.capacity:
                del logs[:len(logs) - self.retain]
        return log

    def get_logs(self, limit=50):
        if limit <= 0:
            return []
        with self.store.lock:
            return list(reversed(self.store.state.logs.logs[-limit:]))
