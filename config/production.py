import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workorder_db"),
}

MAIL_FROM_ADDRESS = os.getenv("MAIL_FROM_ADDRESS", "no-reply@example.com")
# Prefix for invitation and password reset links in queued mails
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "/var/lib/workorder/uploads")
SESSION_LIFETIME_MINUTES = int(os.getenv("SESSION_LIFETIME_MINUTES", "720"))
START_YEAR_MONTH = os.getenv("START_YEAR_MONTH", "2025/01")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
