import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./phindex.db")
DB_SCHEMA = os.getenv("DB_SCHEMA") or None
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Tokens are issued by the external auth provider and signed with its JWT secret
JWT_SECRET = os.getenv("JWT_SECRET")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")
AUTH_TOKEN_URL = os.getenv("AUTH_TOKEN_URL", "auth/token")

AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")
AWS_REGION = os.getenv("AWS_REGION")
AWS_BUCKET_NAME = os.getenv("AWS_BUCKET_NAME")

PROFILE_MEDIA_PREFIX = os.getenv("PROFILE_MEDIA_PREFIX", "profiles")
PROFILE_IMAGE_MAX_BYTES = int(os.getenv("PROFILE_IMAGE_MAX_BYTES", "5242880"))
PROFILE_IMAGE_MAX_W = int(os.getenv("PROFILE_IMAGE_MAX_W", "4096"))
PROFILE_IMAGE_MAX_H = int(os.getenv("PROFILE_IMAGE_MAX_H", "4096"))

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
VOTE_RATE = os.getenv("VOTE_RATE", "30/minute;500/day")
COMMENT_RATE = os.getenv("COMMENT_RATE", "12/minute;300/day")
LIKE_RATE = os.getenv("LIKE_RATE", "30/minute;1000/day")
PROFILE_UPLOAD_RATE = os.getenv("PROFILE_UPLOAD_RATE", "5/minute;50/day")

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "*").split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"

# Client side
PHINDEX_API_URL = os.getenv("PHINDEX_API_URL", "http://localhost:8000")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "10"))
