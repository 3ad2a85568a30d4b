import logging
from datetime import timedelta
from typing import List, Optional

from core.schemas import BanRecord, HistoryEntry, UnbanInfo, UserInfo, UserProfile
from core.status import ban_lapsed

logger = logging.getLogger(__name__)

SYSTEM_ADMIN = "system"


class BanRegistry:
    def __init__(self, store, clock, ledger):
        self.store = store
        self.clock = clock
        self.ledger = ledger

    def _users(self):
        return self.store.state.users

    def _record(self, state, action, user_id, admin_id, reason, **extra):
        state.users.history.append(HistoryEntry(
            action=action,
            user_id=user_id,
            admin_id=admin_id,
            reason=reason,
            timestamp=self.clock.now(),
            **extra,
        ))

    def ban(self, user_id, admin_id="", reason="", temporary=False, days=0) -> BanRecord:
        if temporary and days < 0:
            raise ValueError("days must not be negative")

        now = self.clock.now()
        ban = BanRecord(
            user_id=user_id,
            reason=reason,
            banned_by=admin_id,
            banned_at=now,
            temporary=temporary,
            expires_at=now + timedelta(days=days) if temporary else None,
            active=True,
        )
        with self.store.transaction() as state:
            profile = state.users.users.setdefault(user_id, UserProfile(created_at=now))
            profile.banned = True
            profile.ban_info = ban
            for previous in state.users.banned:
                if previous.user_id == user_id and previous.active:
                    previous.active = False
            state.users.banned.append(ban.model_copy())
            self._record(state, "ban", user_id, admin_id, reason, temporary=temporary, days=days if temporary else None)

        logger.info(f"🔨 Пользователь забанен: {user_id}" + (f" на {days} дней" if temporary else ""))
        return ban

    def unban(self, user_id, admin_id="", reason="") -> bool:
        with self.store.lock:
            if user_id not in self._users().users:
                return False
            with self.store.transaction() as state:
                profile = state.users.users[user_id]
                profile.banned = False
                if profile.ban_info:
                    profile.ban_info.active = False
                for ban in state.users.banned:
                    if ban.user_id == user_id and ban.active:
                        ban.active = False
                profile.unban_info = UnbanInfo(
                    unbanned_at=self.clock.now(),
                    unbanned_by=admin_id,
                    reason=reason,
                )
                self._record(state, "unban", user_id, admin_id, reason)

        logger.info(f"✅ Пользователь разбанен: {user_id} ({admin_id})")
        return True

    def is_banned(self, user_id) -> bool:
        """Может записывать: истекший временный бан снимается прямо здесь."""
        with self.store.lock:
            profile = self._users().users.get(user_id)
            if not profile or not profile.banned:
                return False
            if profile.ban_info and ban_lapsed(profile.ban_info, self.clock.now()):
                self.unban(user_id, SYSTEM_ADMIN, "Temporary ban expired")
                return False
            return True

    def get_user_info(self, user_id) -> UserInfo:
        with self.store.lock:
            banned = self.is_banned(user_id)
            profile = self._users().users.get(user_id) or UserProfile()
            return UserInfo(
                user_id=user_id,
                banned=banned,
                ban_info=profile.ban_info,
                subscription=self.ledger.get(user_id),
                created_at=profile.created_at,
                last_login=profile.last_login,
            )

    def profile(self, user_id) -> Optional[UserProfile]:
        return self._users().users.get(user_id)

    def bans(self, user_id=None) -> List[BanRecord]:
        records = self._users().banned
        if user_id is None:
            return list(records)
        return [ban for ban in records if ban.user_id == user_id]
