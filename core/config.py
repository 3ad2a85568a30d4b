import os
from dotenv import load_dotenv

load_dotenv()


def _ids(raw):
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


# Telegram
TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN")
SUBS_CHAT_ID = os.getenv("SUBS_CHAT_ID")
BAN_CHAT_ID = os.getenv("BAN_CHAT_ID")
LOGS_CHAT_ID = os.getenv("LOGS_CHAT_ID")

# Администраторы
OWNER_ID = os.getenv("OWNER_ID")
ADMIN_IDS = _ids(os.getenv("ADMIN_IDS"))
if OWNER_ID and OWNER_ID not in ADMIN_IDS:
    ADMIN_IDS.append(OWNER_ID)

# API
API_SECRET = os.getenv("API_SECRET", "change-me")
PORT = int(os.getenv("PORT", "5000"))
CORS_ORIGINS = _ids(os.getenv("CORS_ORIGINS", "*"))
ADMIN_USER = os.getenv("ADMIN_USER", "admin")
ADMIN_PASS = os.getenv("ADMIN_PASS", "admin")

# Хранилище
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "json")
DATA_DIR = os.getenv("DATA_DIR", "./data")
DB_URL = os.getenv("DB_URL", "sqlite:///./data/access.db")

LOG_CAPACITY = int(os.getenv("LOG_CAPACITY", "1000"))
LOG_RETAIN = int(os.getenv("LOG_RETAIN", str(LOG_CAPACITY)))
