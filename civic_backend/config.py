"""
Runtime settings, read once from the environment.
"""

import os

BASE_DIR = os.path.join(os.path.dirname(__file__), "..")

SECRET_KEY = os.getenv("CIVIC_SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("CIVIC_TOKEN_EXPIRE_MINUTES", "60"))

# Admin accounts are created by supplying this code at registration
ADMIN_REGISTRATION_CODE = os.getenv("ADMIN_REGISTRATION_CODE", "ADMIN123")

DATA_DIR = os.getenv("CIVIC_DATA_DIR", os.path.join(BASE_DIR, "data"))
UPLOAD_DIR = os.getenv("CIVIC_UPLOAD_DIR", os.path.join(BASE_DIR, "public", "uploads"))
UPLOAD_URL_PREFIX = "/uploads"
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

LOG_LEVEL = os.getenv("CIVIC_LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CIVIC_CORS_ORIGINS", "*").split(",") if o.strip()]

NEARBY_RESULT_LIMIT = 20
NEARBY_DEFAULT_DISTANCE = 1000  # meters
RECENT_REPORTS_LIMIT = 5
