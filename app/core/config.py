import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

# -----------------------
# Database Config
# -----------------------
DB_TYPE = os.getenv("DB_TYPE", "sqlite").lower()

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres setup")
elif DB_TYPE == "sqlite":
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./kitchen.db")
else:
    raise ValueError(f"Unsupported DB_TYPE: {DB_TYPE}")

# -----------------------
# JWT Config
# -----------------------
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise ValueError("JWT_SECRET environment variable must be set")

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 15
ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES = 60
REFRESH_TOKEN_EXPIRE_DAYS = 7

# -----------------------
# Logging
# -----------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# -----------------------
# Business Config
# -----------------------
ORDER_NUMBER_PREFIX = os.getenv("ORDER_NUMBER_PREFIX", "BAF")
INVOICE_NUMBER_PREFIX = os.getenv("INVOICE_NUMBER_PREFIX", "INV")
INVOICE_DUE_DAYS = int(os.getenv("INVOICE_DUE_DAYS", "30"))
COMMISSION_PERCENTAGE = Decimal(os.getenv("COMMISSION_PERCENTAGE", "10"))
DEFAULT_STORE_NAME = os.getenv("DEFAULT_STORE_NAME", "Baf Kitchen")
DEFAULT_APP_NAME = os.getenv("DEFAULT_APP_NAME", "BAF Kitchen")
APP_DOMAIN = os.getenv("APP_DOMAIN", "http://localhost:3000")

# -----------------------
# Storefront Carts
# -----------------------
CART_IDLE_MINUTES = int(os.getenv("CART_IDLE_MINUTES", "120"))
CART_MAX_SESSIONS = int(os.getenv("CART_MAX_SESSIONS", "10000"))
