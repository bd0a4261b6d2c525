import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/rentmyride.db")

# JWT configuration
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 30)))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CURRENCY = os.getenv("CURRENCY", "USD")

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "50"))
# Offset listings (catalog, messages)
MAX_LIST_LIMIT = int(os.getenv("MAX_LIST_LIMIT", "100"))

# Archival job
MESSAGE_ARCHIVE_DAYS = int(os.getenv("MESSAGE_ARCHIVE_DAYS", "15"))
ARCHIVE_HOUR = int(os.getenv("ARCHIVE_HOUR", "2"))
