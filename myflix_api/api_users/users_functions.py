import logging
import re
from datetime import date, datetime, time

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from myflix_api.api_auth.auth_functions import DEFAULT_BCRYPT_ROUNDS, MAX_PASSWORD_BYTES, hash_password
from myflix_api.common import serialize_document
from myflix_api.errors import Conflict, Forbidden, NotFound, ValidationError
from myflix_api.extensions import USERS_COLLECTION

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"[A-Za-z0-9]+")


class UserInput(BaseModel):
    """Validated body of the register and update routes."""

    Username: str = Field(min_length=5)
    Password: str = Field(min_length=1)
    Email: EmailStr
    Birthday: date | None = None

    @field_validator("Username")
    @classmethod
    def username_is_alphanumeric(cls, value: str):
        if not USERNAME_PATTERN.fullmatch(value):
            raise ValueError("Username contains non alphanumeric characters - not allowed.")
        return value

    @field_validator("Password")
    @classmethod
    def password_fits_bcrypt(cls, value: str):
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes.")
        return value


def parse_user_input(payload):
    """
    Validate a request body into a ``UserInput``.

    Args:
        payload: Decoded JSON body.

    Returns:
        UserInput: Validated input.

    Raises:
        ValidationError: With one entry per invalid field.
    """
    try:
        return UserInput.model_validate(payload)
    except PydanticValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or "body",
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        raise ValidationError(errors) from exc


def serialize_user(document: dict | None):
    """
    Serialize a user document for a response.

    Args:
        document (dict | None): User document.

    Returns:
        dict: Safe copy with string identifiers and no password field.
    """
    payload = serialize_document(document)
    payload.pop("Password", None)
    return payload


def build_user_fields(candidate: UserInput, rounds: int):
    """
    Turn validated input into the stored user fields.

    Args:
        candidate (UserInput): Validated input.
        rounds (int): bcrypt cost factor.

    Returns:
        dict: Username, hashed Password, Email and Birthday.
    """
    birthday = None
    if candidate.Birthday is not None:
        # BSON stores datetimes, not dates
        birthday = datetime.combine(candidate.Birthday, time.min)
    return {
        "Username": candidate.Username,
        "Password": hash_password(candidate.Password, rounds),
        "Email": str(candidate.Email),
        "Birthday": birthday,
    }


def find_user(username: str, store):
    """
    Locate a user by exact Username.

    Args:
        username (str): Username from the route.
        store (DocumentStore): Storage handle.

    Returns:
        dict | None: Matching user document.
    """
    if not username:
        return None
    return store.find_one(USERS_COLLECTION, {"Username": username})


def register_user(payload, store, rounds: int = DEFAULT_BCRYPT_ROUNDS):
    """
    Create a user account.

    Args:
        payload: Decoded JSON body.
        store (DocumentStore): Storage handle.
        rounds (int): bcrypt cost factor.

    Returns:
        dict: Stored user document.
    """
    candidate = parse_user_input(payload)
    if find_user(candidate.Username, store):
        raise Conflict(f"{candidate.Username} already exists")

    document = build_user_fields(candidate, rounds)
    document["FavoriteMovies"] = []
    try:
        created = store.insert_one(USERS_COLLECTION, document)
    except Conflict as exc:
        # lost a race with a concurrent registration
        raise Conflict(f"{candidate.Username} already exists") from exc
    logger.info("Registered user %s", candidate.Username)
    return created


def list_users(store):
    return store.find(USERS_COLLECTION)


def get_user(username: str, store):
    user = find_user(username, store)
    if not user:
        raise NotFound("User not found")
    return user


def update_user(username: str, acting_username: str | None, payload, store, rounds: int = DEFAULT_BCRYPT_ROUNDS):
    """
    Replace Username, Password, Email and Birthday of a user.

    Only the user themselves may do this. The incoming password is hashed
    the same way as on registration.

    Args:
        username (str): Username from the route.
        acting_username (str | None): Username of the authenticated caller.
        payload: Decoded JSON body.
        store (DocumentStore): Storage handle.
        rounds (int): bcrypt cost factor.

    Returns:
        dict: User document after the update.
    """
    if acting_username != username:
        logger.warning("User %s tried to update %s", acting_username, username)
        raise Forbidden("Permission denied")

    candidate = parse_user_input(payload)
    if candidate.Username != username and find_user(candidate.Username, store):
        raise Conflict(f"{candidate.Username} already exists")

    try:
        updated = store.find_one_and_update(
            USERS_COLLECTION,
            {"Username": username},
            {"$set": build_user_fields(candidate, rounds)},
        )
    except Conflict as exc:
        raise Conflict(f"{candidate.Username} already exists") from exc
    if not updated:
        raise NotFound("User not found")
    return updated


def delete_user(username: str, store):
    deleted = store.find_one_and_delete(USERS_COLLECTION, {"Username": username})
    if not deleted:
        raise NotFound(f"{username} was not found")
    logger.info("Deleted user %s", username)
    return deleted


def add_favorite(username: str, movie_id: str, store):
    """
    Add a movie to the favorites of a user; adding it twice keeps one entry.

    Args:
        username (str): Owner of the favorites.
        movie_id (str): Movie identifier, not checked against the movies collection.
        store (DocumentStore): Storage handle.

    Returns:
        dict: User document after the update.
    """
    updated = store.find_one_and_update(
        USERS_COLLECTION,
        {"Username": username},
        {"$addToSet": {"FavoriteMovies": movie_id}},
    )
    if not updated:
        raise NotFound("User not found")
    return updated


def remove_favorite(username: str, movie_id: str, store):
    """
    Remove every occurrence of a movie from the favorites of a user.

    Removing a movie that is not a favorite leaves the user unchanged.

    Args:
        username (str): Owner of the favorites.
        movie_id (str): Movie identifier.
        store (DocumentStore): Storage handle.

    Returns:
        dict: User document after the update.
    """
    updated = store.find_one_and_update(
        USERS_COLLECTION,
        {"Username": username},
        {"$pull": {"FavoriteMovies": movie_id}},
    )
    if not updated:
        raise NotFound("User not found")
    return updated


def list_favorites(username: str, store):
    return list(get_user(username, store).get("FavoriteMovies") or [])
