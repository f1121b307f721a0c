import os

from .development import CONTACT_INFO, STAFF_CONTACTS  # noqa: F401

# Required in production; create_app refuses to start without them
JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_HOURS = float(os.getenv("JWT_EXPIRE_HOURS", "24"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD"),
    "database": os.getenv("DB_NAME", "kindergarten_db"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
}

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")

PORT = int(os.getenv("PORT", "5000"))
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DAILY_RATE = float(os.getenv("DAILY_RATE", "194"))
PAID_GROUP_MONTHLY_FEE = float(os.getenv("PAID_GROUP_MONTHLY_FEE", "1300"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
