import os

from .development import CONTACT_INFO, STAFF_CONTACTS  # noqa: F401

JWT_SECRET = "test-secret"
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_HOURS = 1

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", "12345"),
    "database": os.getenv("DB_NAME", "kindergarten_test"),
}

SMTP_HOST = "localhost"
SMTP_PORT = 465
SMTP_USER = None
SMTP_PASSWORD = None

PORT = 5001
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads-test")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

DAILY_RATE = 194
PAID_GROUP_MONTHLY_FEE = 1300

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
