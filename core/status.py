"""Derived state of subscriptions and bans.

Nothing here mutates records: callers that want the stored ``active`` flag
or ban state brought up to date go through the ledger / ban registry.
"""
import math
from datetime import datetime, timedelta
from typing import Dict

from core.schemas import BanRecord, Subscription

FILTERS = ("all", "active", "expired", "lifetime")


def subscription_expired(sub: Subscription, now: datetime) -> bool:
    return sub.expires_at < now


def subscription_live(sub: Subscription, now: datetime) -> bool:
    return sub.active and sub.expires_at > now


def ban_lapsed(ban: BanRecord, now: datetime) -> bool:
    return ban.temporary and ban.expires_at is not None and ban.expires_at < now


def filter_subscriptions(subs: Dict[str, Subscription], filter: str, now: datetime) -> Dict[str, Subscription]:
    if filter not in FILTERS:
        raise ValueError(f"Unknown filter: {filter}")
    if filter == "active":
        return {uid: sub for uid, sub in subs.items() if subscription_live(sub, now)}
    if filter == "expired":
        # frozen подписки тоже считаются истекшими, если срок прошёл
        return {uid: sub for uid, sub in subs.items() if subscription_expired(sub, now)}
    if filter == "lifetime":
        return {uid: sub for uid, sub in subs.items() if sub.type == "lifetime"}
    return dict(subs)


def days_left(sub: Subscription, now: datetime) -> int:
    return math.ceil((sub.expires_at - now) / timedelta(days=1))
