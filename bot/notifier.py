import logging

from telegram.error import TelegramError

logger = logging.getLogger(__name__)


class Notifier:
    """Пересылает сводки действий админов и событий сайта в каналы Telegram."""

    def __init__(self, bot=None, subs_chat_id=None, ban_chat_id=None, logs_chat_id=None):
        self.bot = bot
        self.subs_chat_id = subs_chat_id
        self.ban_chat_id = ban_chat_id
        self.logs_chat_id = logs_chat_id

    async def _send(self, chat_id, text):
        if not self.bot or not chat_id:
            return False
        try:
            await self.bot.send_message(chat_id=chat_id, text=text)
            return True
        except TelegramError as e:
            logger.error(f"❌ Не удалось отправить уведомление в {chat_id}: {e}")
            return False

    async def subscription(self, text):
        return await self._send(self.subs_chat_id, text)

    async def ban(self, text):
        return await self._send(self.ban_chat_id, text)

    async def log(self, event_type, user_id, data=None):
        lines = [f"📝 {event_type}", f"User ID: {user_id}"]
        for key, value in (data or {}).items():
            lines.append(f"{key}: {str(value)[:1024]}")
        return await self._send(self.logs_chat_id, "\n".join(lines))
