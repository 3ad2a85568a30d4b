import logging
from datetime import timedelta
from typing import Dict, List, Optional

from core.plans import plan_days, subscription_type
from core.schemas import HistoryEntry, Subscription
from core.status import filter_subscriptions, subscription_expired

logger = logging.getLogger(__name__)


class SubscriptionLedger:
    """Subscription records plus their append-only history.

    ``get`` (and everything built on it: ``extend``, ``freeze``,
    ``unfreeze``) may flip a record's ``active`` flag to False when its
    expiry has passed. That change is made in memory and reaches storage
    with the next persisted mutation.
    """

    def __init__(self, store, clock):
        self.store = store
        self.clock = clock

    def _table(self):
        return self.store.state.subscriptions

    def _record(self, state, action, user_id, admin_id, reason, **extra):
        state.subscriptions.history.append(HistoryEntry(
            action=action,
            user_id=user_id,
            admin_id=admin_id,
            reason=reason,
            timestamp=self.clock.now(),
            **extra,
        ))

    def grant(self, user_id, plan, duration_days=None, admin_id="", reason="") -> Subscription:
        days = plan_days(plan)
        if duration_days is not None:
            days = duration_days
        if days < 0:
            raise ValueError("duration_days must not be negative")

        now = self.clock.now()
        sub = Subscription(
            user_id=user_id,
            plan=plan,
            type=subscription_type(days),
            granted_at=now,
            expires_at=now + timedelta(days=days),
            granted_by=admin_id,
            reason=reason,
            active=True,
        )
        with self.store.transaction() as state:
            state.subscriptions.subscriptions[user_id] = sub
            self._record(state, "grant", user_id, admin_id, reason, plan=plan, days=days)

        logger.info(f"✅ Подписка выдана: {user_id} - {plan} ({days} дн.)")
        return sub

    def remove(self, user_id, admin_id="", reason="") -> bool:
        with self.store.lock:
            if user_id not in self._table().subscriptions:
                return False
            with self.store.transaction() as state:
                del state.subscriptions.subscriptions[user_id]
                self._record(state, "remove", user_id, admin_id, reason)

        logger.info(f"✅ Подписка удалена: {user_id}")
        return True

    def peek(self, user_id) -> Optional[Subscription]:
        return self._table().subscriptions.get(user_id)

    def get(self, user_id) -> Optional[Subscription]:
        with self.store.lock:
            sub = self.peek(user_id)
            if sub and subscription_expired(sub, self.clock.now()):
                sub.active = False
            return sub

    def list(self, filter="all") -> Dict[str, Subscription]:
        with self.store.lock:
            return filter_subscriptions(self._table().subscriptions, filter, self.clock.now())

    def extend(self, user_id, days, admin_id="", reason="") -> Optional[Subscription]:
        if days < 0:
            raise ValueError("days must not be negative")

        with self.store.lock:
            if self.get(user_id) is None:
                return None
            with self.store.transaction() as state:
                sub = state.subscriptions.subscriptions[user_id]
                sub.expires_at = sub.expires_at + timedelta(days=days)
                sub.active = True
                self._record(state, "extend", user_id, admin_id, reason, days=days)

        logger.info(f"✅ Подписка продлена: {user_id} на {days} дней")
        return sub

    def freeze(self, user_id, admin_id="", reason="") -> Optional[Subscription]:
        with self.store.lock:
            if self.get(user_id) is None:
                return None
            with self.store.transaction() as state:
                sub = state.subscriptions.subscriptions[user_id]
                sub.frozen = True
                sub.frozen_at = self.clock.now()
                self._record(state, "freeze", user_id, admin_id, reason)

        logger.info(f"❄️ Подписка заморожена: {user_id}")
        return sub

    def unfreeze(self, user_id, admin_id="", reason="") -> Optional[Subscription]:
        with self.store.lock:
            current = self.get(user_id)
            if current is None or not current.frozen:
                return None
            with self.store.transaction() as state:
                sub = state.subscriptions.subscriptions[user_id]
                now = self.clock.now()
                frozen_for = now - sub.frozen_at if sub.frozen_at else timedelta(0)
                sub.expires_at = sub.expires_at + frozen_for
                sub.active = sub.expires_at > now
                sub.frozen = False
                sub.frozen_at = None
                self._record(
                    state, "unfreeze", user_id, admin_id, reason,
                    frozen_seconds=frozen_for.total_seconds(),
                )

        logger.info(f"🔥 Подписка разморожена: {user_id}, сдвиг {frozen_for}")
        return sub

    def history(self, user_id=None) -> List[HistoryEntry]:
        entries = self._table().history
        if user_id is None:
            return list(entries)
        return [entry for entry in entries if entry.user_id == user_id]
