import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_card"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Bootstrap admin account, created on startup when AUTO_INIT_DB is on
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@campus.local")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
