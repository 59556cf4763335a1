# finance_tracker/config.py

import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./finance_tracker.db")

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-me")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_JSON = os.getenv("LOG_JSON", "true").lower() in ("1", "true", "yes")

# Pagination for list endpoints
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

# Password hashing cost
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
