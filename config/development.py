import os

JWT_SECRET = os.getenv("JWT_SECRET", "dev-jwt-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_HOURS = float(os.getenv("JWT_EXPIRE_HOURS", "24"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", "root"),
    "database": os.getenv("DB_NAME", "kindergarten_db"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
}

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")

PORT = int(os.getenv("PORT", "5000"))
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Billing rates
DAILY_RATE = float(os.getenv("DAILY_RATE", "194"))
PAID_GROUP_MONTHLY_FEE = float(os.getenv("PAID_GROUP_MONTHLY_FEE", "1300"))

CONTACT_INFO = {
    "name": "Kindergarten",
    "address": os.getenv("CONTACT_ADDRESS", "1 Sunny Street"),
    "phone": os.getenv("CONTACT_PHONE", "+1 555 0100"),
    "email": os.getenv("CONTACT_EMAIL", "info@kindergarten.example"),
    "working_hours": "Mon-Fri 07:00-19:00",
}

STAFF_CONTACTS = [
    {"name": "Head of kindergarten", "role": "admin", "phone": "+1 555 0101", "email": "head@kindergarten.example"},
    {"name": "Psychologist", "role": "psychologist", "phone": "+1 555 0102", "email": "psy@kindergarten.example"},
    {"name": "Nurse", "role": "nurse", "phone": "+1 555 0103", "email": "nurse@kindergarten.example"},
]

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
