import os

from myflix_api.common import parse_boolean

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.getenv("MONGO_DB", "myFlixDB")

JWT_SECRET = os.getenv("JWT_SECRET", "your_jwt_secret")
JWT_ALGORITHM = "HS256"
JWT_TTL_SECONDS = int(os.getenv("JWT_TTL_SECONDS", 7 * 24 * 60 * 60))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 10))

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:8080,http://localhost:1234,http://testsite.com",
    ).split(",")
    if origin.strip()
]

MOVIES_REQUIRE_AUTH = parse_boolean(os.getenv("MOVIES_REQUIRE_AUTH"), default=True)
USERS_LIST_REQUIRES_AUTH = parse_boolean(os.getenv("USERS_LIST_REQUIRES_AUTH"), default=True)

CACHE_ENABLED = parse_boolean(os.getenv("CACHE_ENABLED"), default=True)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", 6379))
REDIS_DB = int(os.environ.get("REDIS_DB", 0))
CACHE_TTL_SECONDS = int(os.environ.get("CACHE_TTL_SECONDS", 600))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))
