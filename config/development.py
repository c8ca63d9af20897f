import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_db"),
}
# The relational sink is optional; the spreadsheet relay works without it.
DB_ENABLED = bool(int(os.getenv("DB_ENABLED", "0")))

# Spreadsheet web-app URL the submission relay forwards to.
GOOGLE_SCRIPT_URL = os.getenv("GOOGLE_SCRIPT_URL", "")

# Where the client sends its events (this app's own relay by default).
SUBMIT_ENDPOINT_URL = os.getenv("SUBMIT_ENDPOINT_URL", "http://127.0.0.1:5000/api/submit")
SYNC_ENABLED = bool(int(os.getenv("SYNC_ENABLED", "1")))
SYNC_DELAY_SECONDS = float(os.getenv("SYNC_DELAY_SECONDS", "60"))
GRACE_SECONDS = int(os.getenv("GRACE_SECONDS", "10"))

# Local store file (the device's persisted tracker state).
STORE_PATH = os.getenv("STORE_PATH", "instance/timeclock_store.json")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
