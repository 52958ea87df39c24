"""
Configuration for the Store Manager API
Environment-driven constants with development defaults
"""

import os
from pathlib import Path
from typing import List

BASE_DIR = Path(__file__).resolve().parent

# ============================================================================
# APPLICATION
# ============================================================================

APP_NAME = "Store Manager API"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Multi-tenant store and product management backend"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SERVER_HOST = os.getenv("HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("PORT", "5000"))
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"

# ============================================================================
# STORAGE
# ============================================================================

# One JSON array file per collection lives here
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))

# Seed demo accounts, a store and products when the users collection is empty
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "true").lower() == "true"

DEFAULT_PRODUCT_IMAGE = os.getenv(
    "DEFAULT_PRODUCT_IMAGE",
    "https://images.pexels.com/photos/230544/pexels-photo-230544.jpeg",
)

# ============================================================================
# AUTH
# ============================================================================

SECRET_KEY = os.getenv("JWT_SECRET", "dev-secret-change")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 24 * 60

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# ============================================================================
# CORS
# ============================================================================

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*")


def get_allowed_origins() -> List[str]:
    """Parse ALLOWED_ORIGINS into a list for CORSMiddleware"""
    if ALLOWED_ORIGINS.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in ALLOWED_ORIGINS.split(",") if origin.strip()]
