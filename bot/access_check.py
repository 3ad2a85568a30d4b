import functools
import logging

from telegram import Update
from telegram.ext import ContextTypes

logger = logging.getLogger(__name__)


def is_admin(user_id, admin_ids) -> bool:
    return str(user_id) in admin_ids


def admin_only(handler):
    @functools.wraps(handler)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE):
        user = update.effective_user
        if user is None or not is_admin(user.id, context.bot_data.get("admin_ids", ())):
            logger.warning(f"⛔ Команда без прав от {user.id if user else 'unknown'}")
            await update.effective_message.reply_text("❌ У вас нет прав!")
            return
        return await handler(update, context)
    return wrapper
