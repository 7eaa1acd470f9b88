import os
from dotenv import load_dotenv

load_dotenv()

APP_ENV = os.getenv("APP_ENV", "development").lower()
IS_PRODUCTION = APP_ENV == "production"
PORT = int(os.getenv("PORT", "3001"))

DATABASE_URL           = os.getenv("DATABASE_URL", "sqlite:///./applicant_data.db")
DB_TIMEOUT_SECONDS     = int(os.getenv("DB_TIMEOUT_SECONDS", "5"))
DB_CONNECT_MAX_RETRIES = int(os.getenv("DB_CONNECT_MAX_RETRIES", "5"))

# File Upload Configuration
MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "10"))
MAX_UPLOAD_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024
ALLOWED_SPREADSHEET_EXTENSIONS = ['.xls', '.xlsx']
ALLOWED_SPREADSHEET_MIME_TYPES = [
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
]

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3001").split(",")
    if origin.strip()
]

RATE_LIMIT_WINDOW_SECONDS      = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS",      "900"))
RATE_LIMIT_MAX_REQUESTS        = int(os.getenv("RATE_LIMIT_MAX_REQUESTS",        "100"))
UPLOAD_RATE_LIMIT_MAX_REQUESTS = int(os.getenv("UPLOAD_RATE_LIMIT_MAX_REQUESTS", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR   = os.getenv("LOG_DIR", "logs")

# Only honour X-Forwarded-For when running behind a proxy that sets it
TRUST_PROXY_HEADERS = os.getenv("TRUST_PROXY_HEADERS", "false").lower() in ("1", "true", "yes")
