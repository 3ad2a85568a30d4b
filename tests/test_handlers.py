from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram.error import NetworkError

from bot import handlers
from bot.bot import COMMANDS, build_application
from bot.notifier import Notifier

ADMIN_ID = 701


def make_update(user_id=ADMIN_ID, username="boss"):
    message = SimpleNamespace(reply_text=AsyncMock())
    return SimpleNamespace(
        effective_user=SimpleNamespace(id=user_id, username=username),
        effective_message=message,
    )


def replied(update):
    return update.effective_message.reply_text.call_args[0][0]


@pytest.fixture
def notifier(fake_bot):
    return Notifier(bot=fake_bot, subs_chat_id="subs", ban_chat_id="bans")


@pytest.fixture
def run(service, notifier):
    async def _run(handler, *args, user_id=ADMIN_ID):
        update = make_update(user_id)
        context = SimpleNamespace(
            args=list(args),
            bot_data={"service": service, "notifier": notifier, "admin_ids": {str(ADMIN_ID)}},
        )
        await handler(update, context)
        return update
    return _run


@pytest.mark.asyncio
async def test_non_admin_is_rejected(run, service):
    update = await run(handlers.sub_give, "u1", "1month", user_id=42)
    assert "нет прав" in replied(update)
    assert service.subscriptions.get("u1") is None


@pytest.mark.asyncio
async def test_sub_give_grants_and_notifies(run, service, fake_bot, clock):
    update = await run(handlers.sub_give, "u1", "1month", "gift", "from", "staff")

    sub = service.subscriptions.get("u1")
    assert sub.expires_at == clock.now() + timedelta(days=30)
    assert sub.granted_by == str(ADMIN_ID)
    assert sub.reason == "gift from staff"
    assert "Подписка выдана" in replied(update)
    assert fake_bot.sent[0][0] == "subs"


@pytest.mark.asyncio
async def test_sub_give_custom_days(run, service, clock):
    await run(handlers.sub_give, "u1", "1month", "45")
    sub = service.subscriptions.get("u1")
    assert sub.expires_at == clock.now() + timedelta(days=45)
    assert sub.reason == "Выдано администратором"


@pytest.mark.asyncio
async def test_sub_give_validates_input(run, service):
    update = await run(handlers.sub_give, "u1", "weekly")
    assert "Неизвестный план" in replied(update)

    update = await run(handlers.sub_give, "u1")
    assert "Использование" in replied(update)

    update = await run(handlers.sub_give, "u1", "1month", "-3")
    assert "больше нуля" in replied(update)
    assert service.subscriptions.get("u1") is None


@pytest.mark.asyncio
async def test_sub_remove(run, service):
    update = await run(handlers.sub_remove, "u1")
    assert "не найдена" in replied(update)

    service.subscriptions.grant("u1", "1month", admin_id="a1")
    update = await run(handlers.sub_remove, "u1", "refund")
    assert "удалена" in replied(update)
    assert service.subscriptions.history("u1")[-1].reason == "refund"


@pytest.mark.asyncio
async def test_sub_check(run, service, clock):
    service.subscriptions.grant("u1", "lifetime", admin_id="a1")
    update = await run(handlers.sub_check, "u1")
    text = replied(update)
    assert "Навсегда" in text
    assert "✅ Да" in text

    service.subscriptions.grant("u2", "1month", admin_id="a1")
    clock.advance(days=31)
    assert "Истекла" in replied(await run(handlers.sub_check, "u2"))


@pytest.mark.asyncio
async def test_sub_list_truncates(run, service):
    for i in range(25):
        service.subscriptions.grant(f"user{i}", "1month", admin_id="a1")

    text = replied(await run(handlers.sub_list))
    assert "(25)" in text
    assert "user19" in text
    assert "user20" not in text
    assert "и ещё 5" in text

    assert "не найдены" in replied(await run(handlers.sub_list, "lifetime"))
    assert "Использование" in replied(await run(handlers.sub_list, "weird"))


@pytest.mark.asyncio
async def test_sub_extend(run, service, clock):
    t0 = clock.now()
    assert "не найдена" in replied(await run(handlers.sub_extend, "u1", "5"))

    service.subscriptions.grant("u1", "1month", admin_id="a1")
    await run(handlers.sub_extend, "u1", "5", "compensation")
    assert service.subscriptions.get("u1").expires_at == t0 + timedelta(days=35)

    assert "Использование" in replied(await run(handlers.sub_extend, "u1", "many"))


@pytest.mark.asyncio
async def test_freeze_and_unfreeze(run, service, clock):
    t0 = clock.now()
    service.subscriptions.grant("u1", "1month", admin_id="a1")

    assert "не заморожена" in replied(await run(handlers.sub_unfreeze, "u1"))

    clock.advance(days=10)
    assert "заморожена" in replied(await run(handlers.sub_freeze, "u1"))
    clock.advance(days=5)
    assert "разморожена" in replied(await run(handlers.sub_unfreeze, "u1"))
    assert service.subscriptions.get("u1").expires_at == t0 + timedelta(days=35)


@pytest.mark.asyncio
async def test_ban_flow(run, service, fake_bot, clock):
    await run(handlers.user_tempban, "u1", "2", "flood")
    assert service.bans.is_banned("u1") is True
    assert fake_bot.sent[-1][0] == "bans"

    text = replied(await run(handlers.user_info, "u1"))
    assert "🔨 Да" in text
    assert "flood" in text
    assert "⚡ FREE" in text

    clock.advance(days=3)
    assert "✅ Нет" in replied(await run(handlers.user_info, "u1"))

    await run(handlers.user_ban, "u1")
    assert service.bans.profile("u1").ban_info.reason == "Нарушение правил"

    assert "разбанен" in replied(await run(handlers.user_unban, "u1"))
    assert "не найден" in replied(await run(handlers.user_unban, "ghost"))


@pytest.mark.asyncio
async def test_tempban_requires_days(run, service):
    assert "Использование" in replied(await run(handlers.user_tempban, "u1"))
    assert "больше нуля" in replied(await run(handlers.user_tempban, "u1", "0"))
    assert service.bans.profile("u1") is None


@pytest.mark.asyncio
async def test_notifier_swallows_send_errors():
    bot = SimpleNamespace(send_message=AsyncMock(side_effect=NetworkError("boom")))
    notifier = Notifier(bot=bot, subs_chat_id="subs")

    assert await notifier.subscription("hello") is False
    assert await notifier.ban("no chat configured") is False
    bot.send_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_error_handler_logs(caplog):
    context = SimpleNamespace(error=RuntimeError("kaput"))
    await handlers.error_handler(None, context)
    assert "kaput" in caplog.text


def test_build_application_wires_commands(service, notifier):
    app = build_application("123456:TEST-TOKEN", service, notifier, ["1", 2])

    registered = {command for handler in app.handlers[0] for command in handler.commands}
    assert registered == {name for name, _, _ in COMMANDS}
    assert app.bot_data["admin_ids"] == {"1", "2"}
    assert app.post_init is None
    assert notifier.bot is app.bot
