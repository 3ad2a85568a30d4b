import logging

from core import config
from core.bans import BanRegistry
from core.clock import SystemClock
from core.ledger import SubscriptionLedger
from core.logs import LogStore
from core.storage import JsonFileStorage, SqlStorage
from core.store import AccessStore

logger = logging.getLogger(__name__)


class AccessService:
    def __init__(self, storage, clock=None, log_capacity=1000, log_retain=None):
        self.clock = clock or SystemClock()
        self.store = AccessStore(storage)
        self.subscriptions = SubscriptionLedger(self.store, self.clock)
        self.bans = BanRegistry(self.store, self.clock, self.subscriptions)
        self.logs = LogStore(self.store, self.clock, log_capacity, log_retain)

    @classmethod
    def from_settings(cls):
        if config.STORAGE_BACKEND == "sql":
            storage = SqlStorage.from_url(config.DB_URL)
        elif config.STORAGE_BACKEND == "json":
            storage = JsonFileStorage(config.DATA_DIR)
        else:
            raise ValueError(f"Unknown STORAGE_BACKEND: {config.STORAGE_BACKEND}")
        logger.info(f"💾 Хранилище: {config.STORAGE_BACKEND}")
        return cls(storage, log_capacity=config.LOG_CAPACITY, log_retain=config.LOG_RETAIN)

    def get_user_info(self, user_id):
        return self.bans.get_user_info(user_id)

    def save_all(self):
        self.store.save_all()
