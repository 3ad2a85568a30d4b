import logging
from contextlib import asynccontextmanager

import uvicorn

from app.main import create_app
from bot.bot import build_application, register_commands
from bot.notifier import Notifier
from core import config
from core.service import AccessService

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
logger = logging.getLogger(__name__)

service = AccessService.from_settings()
notifier = Notifier(
    subs_chat_id=config.SUBS_CHAT_ID,
    ban_chat_id=config.BAN_CHAT_ID,
    logs_chat_id=config.LOGS_CHAT_ID,
)


@asynccontextmanager
async def lifespan(app):
    bot_app = None
    if config.TELEGRAM_TOKEN:
        bot_app = build_application(config.TELEGRAM_TOKEN, service, notifier, config.ADMIN_IDS)
        await bot_app.initialize()
        await register_commands(bot_app)
        await bot_app.start()
        await bot_app.updater.start_polling()
        logger.info(f"✅ Бот запущен, админов: {len(config.ADMIN_IDS)}")
    else:
        logger.warning("⚠️ TELEGRAM_TOKEN не задан, бот не запущен")

    yield

    logger.info("🛑 Остановка...")
    if bot_app:
        await bot_app.updater.stop()
        await bot_app.stop()
        await bot_app.shutdown()
    service.save_all()


app = create_app(
    service,
    notifier,
    api_secret=config.API_SECRET,
    admin_user=config.ADMIN_USER,
    admin_pass=config.ADMIN_PASS,
    cors_origins=config.CORS_ORIGINS,
    lifespan=lifespan,
)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
