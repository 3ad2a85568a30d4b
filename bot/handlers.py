import logging

from telegram import Update
from telegram.ext import ContextTypes

from bot.access_check import admin_only
from core.plans import PLANS, plan_label
from core.status import FILTERS, days_left

logger = logging.getLogger(__name__)

LIST_LIMIT = 20


def _fmt(dt):
    return dt.strftime('%d.%m.%Y %H:%M') + " UTC"


def _int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _reason(parts, default):
    return " ".join(parts).strip() or default


def _admin(update):
    return str(update.effective_user.id)


def _kind(sub):
    return "♾️" if sub.type == "lifetime" else "💎"


async def _usage(update, text):
    await update.effective_message.reply_text(f"ℹ️ Использование: {text}")


@admin_only
async def sub_give(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    if len(args) < 2:
        return await _usage(update, "/sub_give <user_id> <plan> [days] [reason]")

    user_id, plan = args[0], args[1]
    if plan not in PLANS:
        return await update.effective_message.reply_text(
            f"❌ Неизвестный план: {plan}\nДоступные: {', '.join(PLANS)}"
        )
    rest = args[2:]
    days = _int(rest[0]) if rest else None
    if days is not None:
        rest = rest[1:]
        if days <= 0:
            return await update.effective_message.reply_text("❌ Количество дней должно быть больше нуля")
    reason = _reason(rest, "Выдано администратором")

    service = context.bot_data["service"]
    sub = service.subscriptions.grant(user_id, plan, days, _admin(update), reason)

    text = (
        f"💎 Подписка выдана\n\n"
        f"User ID: {user_id}\n"
        f"План: {plan_label(plan)}\n"
        f"Дней: {(sub.expires_at - sub.granted_at).days}\n"
        f"Истекает: {_fmt(sub.expires_at)}\n"
        f"Причина: {reason}\n"
        f"Выдал: {update.effective_user.username or _admin(update)}"
    )
    await update.effective_message.reply_text(text)
    await context.bot_data["notifier"].subscription(text)


@admin_only
async def sub_remove(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    if not args:
        return await _usage(update, "/sub_remove <user_id> [reason]")

    user_id = args[0]
    reason = _reason(args[1:], "Удалено администратором")
    service = context.bot_data["service"]
    if not service.subscriptions.remove(user_id, _admin(update), reason):
        return await update.effective_message.reply_text("❌ Подписка не найдена!")

    text = f"🗑️ Подписка удалена\n\nUser ID: {user_id}\nПричина: {reason}"
    await update.effective_message.reply_text(text)
    await context.bot_data["notifier"].subscription(text)


@admin_only
async def sub_check(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    if not args:
        return await _usage(update, "/sub_check <user_id>")

    service = context.bot_data["service"]
    sub = service.subscriptions.get(args[0])
    if not sub:
        return await update.effective_message.reply_text("❌ Подписка не найдена!")

    left = days_left(sub, service.clock.now())
    lines = [
        "💎 Информация о подписке",
        "",
        f"User ID: {sub.user_id}",
        f"Тип: {'♾️ Навсегда' if sub.type == 'lifetime' else '💎 PRO'}",
        f"План: {sub.plan}",
        f"Активна: {'✅ Да' if sub.active else '❌ Нет'}",
        f"Выдана: {_fmt(sub.granted_at)}",
        f"Истекает: {_fmt(sub.expires_at)}",
        f"Осталось: {f'{left} дней' if left > 0 else 'Истекла'}",
    ]
    if sub.frozen:
        lines.append(f"❄️ Заморожена с {_fmt(sub.frozen_at)}")
    await update.effective_message.reply_text("\n".join(lines))


@admin_only
async def sub_list(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    filter = args[0] if args else "all"
    if filter not in FILTERS:
        return await _usage(update, f"/sub_list [{'|'.join(FILTERS)}]")

    subs = context.bot_data["service"].subscriptions.list(filter)
    count = len(subs)
    if count == 0:
        return await update.effective_message.reply_text("❌ Подписки не найдены!")

    lines = [f"📋 Список подписок ({count})", ""]
    for user_id, sub in list(subs.items())[:LIST_LIMIT]:
        lines.append(f"• {user_id} - {_kind(sub)} {sub.plan} (до {sub.expires_at.strftime('%d.%m.%Y')})")
    if count > LIST_LIMIT:
        lines.append(f"\n... и ещё {count - LIST_LIMIT}")
    await update.effective_message.reply_text("\n".join(lines))


@admin_only
async def sub_extend(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    days = _int(args[1]) if len(args) > 1 else None
    if days is None:
        return await _usage(update, "/sub_extend <user_id> <days> [reason]")
    if days <= 0:
        return await update.effective_message.reply_text("❌ Количество дней должно быть больше нуля")

    user_id = args[0]
    reason = _reason(args[2:], "Продлено администратором")
    sub = context.bot_data["service"].subscriptions.extend(user_id, days, _admin(update), reason)
    if not sub:
        return await update.effective_message.reply_text("❌ Подписка не найдена!")

    text = (
        f"⏰ Подписка продлена\n\n"
        f"User ID: {user_id}\n"
        f"Продлено на: {days} дней\n"
        f"Новая дата: {_fmt(sub.expires_at)}\n"
        f"Причина: {reason}"
    )
    await update.effective_message.reply_text(text)
    await context.bot_data["notifier"].subscription(text)


@admin_only
async def sub_freeze(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    if not args:
        return await _usage(update, "/sub_freeze <user_id> [reason]")

    reason = _reason(args[1:], "Заморожено администратором")
    sub = context.bot_data["service"].subscriptions.freeze(args[0], _admin(update), reason)
    if not sub:
        return await update.effective_message.reply_text("❌ Подписка не найдена!")
    await update.effective_message.reply_text(
        f"❄️ Подписка заморожена\n\nUser ID: {sub.user_id}\nС: {_fmt(sub.frozen_at)}\nПричина: {reason}"
    )


@admin_only
async def sub_unfreeze(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    if not args:
        return await _usage(update, "/sub_unfreeze <user_id> [reason]")

    reason = _reason(args[1:], "Разморожено администратором")
    sub = context.bot_data["service"].subscriptions.unfreeze(args[0], _admin(update), reason)
    if not sub:
        return await update.effective_message.reply_text("❌ Подписка не найдена или не заморожена!")
    await update.effective_message.reply_text(
        f"🔥 Подписка разморожена\n\nUser ID: {sub.user_id}\nНовая дата: {_fmt(sub.expires_at)}\nПричина: {reason}"
    )


@admin_only
async def user_ban(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    if not args:
        return await _usage(update, "/user_ban <user_id> [reason]")

    user_id = args[0]
    reason = _reason(args[1:], "Нарушение правил")
    context.bot_data["service"].bans.ban(user_id, _admin(update), reason)

    text = (
        f"🔨 Пользователь забанен\n\n"
        f"User ID: {user_id}\n"
        f"Причина: {reason}\n"
        f"Забанил: {update.effective_user.username or _admin(update)}"
    )
    await update.effective_message.reply_text(text)
    await context.bot_data["notifier"].ban(text)


@admin_only
async def user_tempban(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    days = _int(args[1]) if len(args) > 1 else None
    if days is None:
        return await _usage(update, "/user_tempban <user_id> <days> [reason]")
    if days <= 0:
        return await update.effective_message.reply_text("❌ Количество дней должно быть больше нуля")

    user_id = args[0]
    reason = _reason(args[2:], "Временное нарушение")
    ban = context.bot_data["service"].bans.ban(user_id, _admin(update), reason, temporary=True, days=days)

    text = (
        f"⏰ Временный бан\n\n"
        f"User ID: {user_id}\n"
        f"Длительность: {days} дней\n"
        f"До: {_fmt(ban.expires_at)}\n"
        f"Причина: {reason}"
    )
    await update.effective_message.reply_text(text)
    await context.bot_data["notifier"].ban(text)


@admin_only
async def user_unban(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    if not args:
        return await _usage(update, "/user_unban <user_id> [reason]")

    user_id = args[0]
    reason = _reason(args[1:], "Разбанен администратором")
    if not context.bot_data["service"].bans.unban(user_id, _admin(update), reason):
        return await update.effective_message.reply_text("❌ Пользователь не найден!")

    text = f"✅ Пользователь разбанен\n\nUser ID: {user_id}\nПричина: {reason}"
    await update.effective_message.reply_text(text)
    await context.bot_data["notifier"].ban(text)


@admin_only
async def user_info(update: Update, context: ContextTypes.DEFAULT_TYPE):
    args = list(context.args or [])
    if not args:
        return await _usage(update, "/user_info <user_id>")

    info = context.bot_data["service"].get_user_info(args[0])
    sub = info.subscription
    lines = [
        "👤 Информация о пользователе",
        "",
        f"User ID: {info.user_id}",
        f"Забанен: {'🔨 Да' if info.banned else '✅ Нет'}",
        f"Подписка: {f'{_kind(sub)} {sub.plan}' if sub else '⚡ FREE'}",
    ]
    if info.banned and info.ban_info:
        lines.append(f"Причина бана: {info.ban_info.reason or 'Не указана'}")
        if info.ban_info.temporary:
            lines.append(f"Бан до: {_fmt(info.ban_info.expires_at)}")
    await update.effective_message.reply_text("\n".join(lines))


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    logger.error(f"❌ Ошибка выполнения команды: {context.error}", exc_info=context.error)
    if isinstance(update, Update) and update.effective_message:
        await update.effective_message.reply_text("❌ Произошла ошибка!")
