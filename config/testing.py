import os
import tempfile

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_test"),
}
DB_ENABLED = False

GOOGLE_SCRIPT_URL = ""

SUBMIT_ENDPOINT_URL = ""
SYNC_ENABLED = False
SYNC_DELAY_SECONDS = 60
GRACE_SECONDS = 10

STORE_PATH = os.path.join(tempfile.gettempdir(), "timeclock_test_store.json")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
