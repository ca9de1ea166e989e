from flask import current_app

STORE_KEY = "myflix_store"
CACHE_KEY = "myflix_cache"

USERS_COLLECTION = "users"
MOVIES_COLLECTION = "movies"


def get_store():
    """
    Return the DocumentStore registered on the running app.

    Returns:
        DocumentStore: Store injected by ``create_app``.
    """
    return current_app.extensions[STORE_KEY]


def get_cache():
    """
    Return the Redis client registered on the running app.

    Returns:
        Redis | None: Cache client, or None when caching is disabled.
    """
    return current_app.extensions.get(CACHE_KEY)
