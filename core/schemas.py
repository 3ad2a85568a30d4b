from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Subscription(BaseModel):
    user_id: str
    plan: str
    type: str
    granted_at: datetime
    expires_at: datetime
    granted_by: str
    reason: str = ""
    active: bool = True
    frozen: bool = False
    frozen_at: Optional[datetime] = None


class HistoryEntry(BaseModel):
    action: str
    user_id: str
    admin_id: str
    reason: str = ""
    timestamp: datetime

    # plan, days, frozen_seconds и т.д. зависят от action
    model_config = ConfigDict(extra="allow")


class BanRecord(BaseModel):
    user_id: str
    reason: str = ""
    banned_by: str
    banned_at: datetime
    temporary: bool = False
    expires_at: Optional[datetime] = None
    active: bool = True


class UnbanInfo(BaseModel):
    unbanned_at: datetime
    unbanned_by: str
    reason: str = ""


class UserProfile(BaseModel):
    banned: bool = False
    ban_info: Optional[BanRecord] = None
    unban_info: Optional[UnbanInfo] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class LogEntry(BaseModel):
    id: str
    event_type: str
    user_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime


class SubscriptionTable(BaseModel):
    subscriptions: Dict[str, Subscription] = Field(default_factory=dict)
    history: List[HistoryEntry] = Field(default_factory=list)


class UserTable(BaseModel):
    users: Dict[str, UserProfile] = Field(default_factory=dict)
    banned: List[BanRecord] = Field(default_factory=list)
    history: List[HistoryEntry] = Field(default_factory=list)


class LogTable(BaseModel):
    logs: List[LogEntry] = Field(default_factory=list)


class AccessState(BaseModel):
    subscriptions: SubscriptionTable = Field(default_factory=SubscriptionTable)
    users: UserTable = Field(default_factory=UserTable)
    logs: LogTable = Field(default_factory=LogTable)


class UserInfo(BaseModel):
    user_id: str
    banned: bool
    ban_info: Optional[BanRecord] = None
    subscription: Optional[Subscription] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
