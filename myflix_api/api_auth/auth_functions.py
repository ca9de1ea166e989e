import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import bcrypt
import jwt
from flask import current_app, g, request

from myflix_api.errors import Forbidden, InternalError, InvalidCredentials, Unauthenticated
from myflix_api.extensions import USERS_COLLECTION

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 10
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS):
    """
    Hash a plaintext password with a fresh salt.

    Args:
        password (str): Plaintext password.
        rounds (int): bcrypt cost factor.

    Returns:
        str: bcrypt digest.
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, digest: str):
    """
    Check a plaintext password against a stored digest.

    Args:
        password (str): Candidate plaintext.
        digest (str): Stored bcrypt digest.

    Returns:
        bool: True when the password matches.

    Raises:
        InternalError: When ``digest`` is not a bcrypt hash.
    """
    candidate = password.encode("utf-8")
    # no stored password can be longer than bcrypt accepts
    if len(candidate) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(candidate, (digest or "").encode("utf-8"))
    except ValueError as exc:
        logger.error("Stored password digest is malformed: %s", exc)
        raise InternalError(details="Stored password digest is malformed") from exc


def issue_token(username: str, secret: str, ttl_seconds: int, algorithm: str = "HS256", now: datetime | None = None):
    """
    Create a signed session token for a user.

    Args:
        username (str): Identity placed in the ``sub`` claim.
        secret (str): Signing key.
        ttl_seconds (int): Lifetime of the token.
        algorithm (str): JWT signing algorithm.
        now (datetime | None): Issuance time, defaults to the current UTC time.

    Returns:
        str: Encoded JWT.
    """
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "Username": username,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256"):
    """
    Verify a session token and return its claims.

    Args:
        token (str): Encoded JWT.
        secret (str): Signing key.
        algorithm (str): Accepted signing algorithm.

    Returns:
        dict: Verified claims; ``sub`` holds the Username.

    Raises:
        Unauthenticated: On a bad signature, an expired token or a malformed token.
    """
    try:
        return jwt.decode(token, secret, algorithms=[algorithm], options={"require": ["exp", "sub"]})
    except jwt.PyJWTError as exc:
        logger.info("Rejected session token: %s", exc)
        raise Unauthenticated("Invalid or expired token") from exc


def login(store, username: str, password: str, secret: str, ttl_seconds: int, algorithm: str = "HS256"):
    """
    Check credentials and issue a session token.

    A missing user and a wrong password fail the same way.

    Args:
        store (DocumentStore): Storage holding the users collection.
        username (str): Username supplied by the client.
        password (str): Plaintext password supplied by the client.
        secret (str): Signing key.
        ttl_seconds (int): Token lifetime.
        algorithm (str): JWT signing algorithm.

    Returns:
        tuple[dict, str]: Stored user document and the encoded token.
    """
    user = store.find_one(USERS_COLLECTION, {"Username": username})
    if not user or not verify_password(password, user.get("Password", "")):
        raise InvalidCredentials()
    token = issue_token(user["Username"], secret, ttl_seconds, algorithm)
    return user, token


def read_bearer_token():
    """
    Extract the token from the ``Authorization`` header.

    Returns:
        str: Raw token.

    Raises:
        Unauthenticated: When the header is missing or not a bearer credential.
    """
    authorization = request.headers.get("Authorization", "")
    if not authorization:
        raise Unauthenticated("Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthenticated("Invalid Authorization header")
    return parts[1]


def authenticate_request():
    """
    Verify the bearer token of the current request and remember the claims on ``g``.

    Returns:
        dict: Verified claims.
    """
    claims = decode_token(
        read_bearer_token(),
        current_app.config["JWT_SECRET"],
        current_app.config["JWT_ALGORITHM"],
    )
    g.identity = claims
    return claims


def current_username():
    identity = g.get("identity")
    return identity.get("sub") if identity else None


def ensure_owner(username: str):
    """
    Allow the request only when the authenticated user owns ``username``.

    Args:
        username (str): Username taken from the route.

    Raises:
        Forbidden: When the authenticated identity is someone else.
    """
    if current_username() != username:
        logger.warning("User %s tried to modify %s", current_username(), username)
        raise Forbidden("Permission denied")


def login_required(view):
    """Reject the request with 401 unless it carries a valid session token."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate_request()
        return view(*args, **kwargs)

    return wrapper


def login_required_if(flag: str):
    """
    Gate a view behind authentication when the config flag ``flag`` is enabled.

    Args:
        flag (str): Name of a boolean config entry.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_app.config.get(flag, True):
                authenticate_request()
            return view(*args, **kwargs)

        return wrapper

    return decorator


def owner_required(param: str = "Username"):
    """
    Require a session whose identity matches the route argument ``param``.

    Args:
        param (str): Name of the view argument holding the owning Username.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            authenticate_request()
            ensure_owner(kwargs.get(param))
            return view(*args, **kwargs)

        return wrapper

    return decorator
