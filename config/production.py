import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_db"),
}
DB_ENABLED = bool(int(os.getenv("DB_ENABLED", "1")))

GOOGLE_SCRIPT_URL = os.getenv("GOOGLE_SCRIPT_URL", "")

SUBMIT_ENDPOINT_URL = os.getenv("SUBMIT_ENDPOINT_URL", "")
SYNC_ENABLED = bool(int(os.getenv("SYNC_ENABLED", "1")))
SYNC_DELAY_SECONDS = float(os.getenv("SYNC_DELAY_SECONDS", "60"))
GRACE_SECONDS = int(os.getenv("GRACE_SECONDS", "10"))

STORE_PATH = os.getenv("STORE_PATH", "instance/timeclock_store.json")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
