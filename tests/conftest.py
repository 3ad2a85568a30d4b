"""
Pytest fixtures: a controllable clock and a service backed by a temporary data dir
"""
from datetime import datetime, timedelta, timezone

import pytest

from core.service import AccessService
from core.storage import JsonFileStorage

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now=T0):
        self.current = now

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class FakeBot:
    def __init__(self):
        self.sent = []

    async def send_message(self, chat_id, text):
        self.sent.append((chat_id, text))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def storage(data_dir):
    return JsonFileStorage(data_dir)


@pytest.fixture
def service(storage, clock):
    return AccessService(storage, clock=clock)


@pytest.fixture
def fake_bot():
    return FakeBot()
