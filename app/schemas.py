from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.schemas import BanRecord, LogEntry, Subscription


class SubscriptionStatus(BaseModel):
    user_id: str
    subscription: Optional[Subscription] = None
    banned: bool
    ban_info: Optional[BanRecord] = None


class SubscriptionList(BaseModel):
    subscriptions: Dict[str, Subscription]
    count: int


class LogCreate(BaseModel):
    event_type: str
    user_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class LogCreated(BaseModel):
    status: str = "ok"
    log: LogEntry


class LogList(BaseModel):
    logs: List[LogEntry]
    count: int


class Health(BaseModel):
    status: str = "ok"
    uptime: float
