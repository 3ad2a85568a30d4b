from telegram import BotCommand
from telegram.ext import ApplicationBuilder, CommandHandler

from bot import handlers

COMMANDS = [
    ("sub_give", "Выдать подписку", handlers.sub_give),
    ("sub_remove", "Убрать подписку", handlers.sub_remove),
    ("sub_check", "Проверить статус подписки", handlers.sub_check),
    ("sub_list", "Список подписок", handlers.sub_list),
    ("sub_extend", "Продлить подписку", handlers.sub_extend),
    ("sub_freeze", "Заморозить подписку", handlers.sub_freeze),
    ("sub_unfreeze", "Разморозить подписку", handlers.sub_unfreeze),
    ("user_ban", "Забанить пользователя", handlers.user_ban),
    ("user_tempban", "Временно забанить пользователя", handlers.user_tempban),
    ("user_unban", "Разбанить пользователя", handlers.user_unban),
    ("user_info", "Информация о пользователе", handlers.user_info),
]


def build_application(token, service, notifier, admin_ids):
    app = ApplicationBuilder().token(token).build()
    app.bot_data.update(service=service, notifier=notifier, admin_ids={str(i) for i in admin_ids})
    for name, _, handler in COMMANDS:
        app.add_handler(CommandHandler(name, handler))
    app.add_error_handler(handlers.error_handler)
    notifier.bot = app.bot
    return app


async def register_commands(app):
    await app.bot.set_my_commands([BotCommand(name, description) for name, description, _ in COMMANDS])
