import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_attendance"),
}

TIMEZONE = os.getenv("TIMEZONE", "")

QR_SIGNING_SECRET = os.getenv("QR_SIGNING_SECRET", "")
QR_REQUIRE_SIGNATURE = bool(int(os.getenv("QR_REQUIRE_SIGNATURE", "0")))

OPERATOR_API_KEY = os.getenv("OPERATOR_API_KEY", "")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
