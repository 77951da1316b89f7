import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workorder_db"),
}

# Sender address written into the send_mails outbox
MAIL_FROM_ADDRESS = os.getenv("MAIL_FROM_ADDRESS", "no-reply@example.com")
# Prefix for invitation and password reset links in queued mails
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

# Uploaded instructional videos
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")

SESSION_LIFETIME_MINUTES = int(os.getenv("SESSION_LIFETIME_MINUTES", "1440"))

# First month offered in the monthly proceeds selector (YYYY/MM)
START_YEAR_MONTH = os.getenv("START_YEAR_MONTH", "2025/01")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
