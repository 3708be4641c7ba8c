import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_attendance"),
}

# IANA zone used to compute "today" and the auto-checkout cutoff; empty means host local time.
TIMEZONE = os.getenv("TIMEZONE", "")

# Optional HMAC key for member QR codes. Unsigned codes stay valid unless QR_REQUIRE_SIGNATURE=1.
QR_SIGNING_SECRET = os.getenv("QR_SIGNING_SECRET", "")
QR_REQUIRE_SIGNATURE = bool(int(os.getenv("QR_REQUIRE_SIGNATURE", "0")))

OPERATOR_API_KEY = os.getenv("OPERATOR_API_KEY", "dev-operator-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
