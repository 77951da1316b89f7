import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workorder_test"),
}

MAIL_FROM_ADDRESS = "test@example.com"
# Prefix for invitation and password reset links in queued mails
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "/tmp/workorder-test-uploads")
SESSION_LIFETIME_MINUTES = 30
START_YEAR_MONTH = "2025/01"

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
