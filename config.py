"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Billing defaults ──────────────────────────────────────
# Applied when a subscription/service record leaves the field empty.
DEFAULT_PAYMENT_TYPE: str = os.getenv("DEFAULT_PAYMENT_TYPE", "advance")
DEFAULT_RENOVATION: str = os.getenv("DEFAULT_RENOVATION", "first_day")

# ── Proportional tickets ──────────────────────────────────
NEW_SUBSCRIPTION_WINDOW_DAYS: int = int(os.getenv("NEW_SUBSCRIPTION_WINDOW_DAYS", "7"))

# ── Payment dates ─────────────────────────────────────────
PAYMENT_DUE_SOON_DAYS: int = int(os.getenv("PAYMENT_DUE_SOON_DAYS", "7"))
PAYMENT_DATE_UPDATE_INTERVAL_MINUTES: int = int(
    os.getenv("PAYMENT_DATE_UPDATE_INTERVAL_MINUTES", "60")
)

# ── Batch processing ──────────────────────────────────────
BATCH_MAX_WORKERS: int = int(os.getenv("BATCH_MAX_WORKERS", "4"))
