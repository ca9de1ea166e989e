import json
import logging

import redis

from myflix_api.common import build_cache_key, serialize_document
from myflix_api.errors import NotFound
from myflix_api.extensions import MOVIES_COLLECTION

logger = logging.getLogger(__name__)

GENRE_FIELDS = {"name": "Genre.Name", "description": "Genre.Description"}
DIRECTOR_FIELDS = {"name": "Director.Name", "bio": "Director.Bio"}


def read_cache(redis_client: redis.Redis | None, cache_key: str):
    """
    Read a JSON value from Redis.

    Args:
        redis_client (Redis | None): Redis client, or None when caching is off.
        cache_key (str): Key to read.

    Returns:
        Any: Decoded value, or None on a miss or a cache failure.
    """
    if redis_client is None:
        return None
    try:
        cached = redis_client.get(cache_key)
    except redis.RedisError as exc:
        logger.warning("cache read failed for %s: %s", cache_key, exc)
        return None
    if not cached:
        logger.debug("cache miss %s", cache_key)
        return None
    try:
        value = json.loads(cached)
    except json.JSONDecodeError:
        return None
    logger.debug("cache hit %s", cache_key)
    return value


def write_cache(redis_client: redis.Redis | None, cache_key: str, cache_ttl: int, value):
    if redis_client is None:
        return
    try:
        redis_client.setex(cache_key, cache_ttl, json.dumps(value))
    except redis.RedisError as exc:
        logger.warning("cache write failed for %s: %s", cache_key, exc)


def fetch_cached(redis_client: redis.Redis | None, cache_key: str, cache_ttl: int, loader):
    """
    Return a cached value, or load it and cache it when found.

    Args:
        redis_client (Redis | None): Redis client.
        cache_key (str): Cache key.
        cache_ttl (int): Cache time-to-live in seconds.
        loader (callable): Returns the serialized value, or None when not found.

    Returns:
        Any: Serialized value, or None when ``loader`` found nothing.
    """
    cached = read_cache(redis_client, cache_key)
    if cached is not None:
        return cached

    value = loader()
    if value is not None:
        write_cache(redis_client, cache_key, cache_ttl, value)
    return value


def list_movies(store, redis_client: redis.Redis | None = None, cache_ttl: int = 600):
    """
    Return every movie.

    Args:
        store (DocumentStore): Storage handle.
        redis_client (Redis | None): Optional cache.
        cache_ttl (int): Cache time-to-live in seconds.

    Returns:
        list[dict]: Serialized movies.
    """
    return fetch_cached(
        redis_client,
        build_cache_key("movies", "all"),
        cache_ttl,
        lambda: [serialize_document(movie) for movie in store.find(MOVIES_COLLECTION)],
    )


def get_movie_by_title(title: str, store, redis_client: redis.Redis | None = None, cache_ttl: int = 600):
    """
    Look up a movie by exact title.

    Args:
        title (str): Title from the path segment.
        store (DocumentStore): Storage handle.
        redis_client (Redis | None): Optional cache.
        cache_ttl (int): Cache time-to-live in seconds.

    Returns:
        dict: Serialized movie.

    Raises:
        NotFound: When no movie has this title.
    """

    def load():
        movie = store.find_one(MOVIES_COLLECTION, {"Title": title})
        return serialize_document(movie) if movie else None

    movie = fetch_cached(redis_client, build_cache_key("movie_detail", title), cache_ttl, load)
    if movie is None:
        raise NotFound("Movie not found")
    return movie


def build_summary(store, key: str, value: str, fields: dict[str, str]):
    """
    Group every movie sharing one value of ``key`` into a summary.

    Args:
        store (DocumentStore): Storage handle.
        key (str): Dotted path to group on.
        value (str): Value to match.
        fields (dict[str, str]): Summary fields taken from the first match.

    Returns:
        dict | None: Serialized summary with a ``movies`` list, or None when nothing matches.
    """
    summary = store.group_first(MOVIES_COLLECTION, key, value, fields, "movies")
    return serialize_document(summary) if summary else None


def get_genre(name: str, store, redis_client: redis.Redis | None = None, cache_ttl: int = 600):
    summary = fetch_cached(
        redis_client,
        build_cache_key("genre", name),
        cache_ttl,
        lambda: build_summary(store, "Genre.Name", name, GENRE_FIELDS),
    )
    if summary is None:
        raise NotFound("Genre not found")
    return summary


def get_director(name: str, store, redis_client: redis.Redis | None = None, cache_ttl: int = 600):
    summary = fetch_cached(
        redis_client,
        build_cache_key("director", name),
        cache_ttl,
        lambda: build_summary(store, "Director.Name", name, DIRECTOR_FIELDS),
    )
    if summary is None:
        raise NotFound("Director not found")
    return summary


def seed_movies(store, movies: list[dict]):
    """
    Insert movies that are not stored yet, matched by Title.

    Args:
        store (DocumentStore): Storage handle.
        movies (list[dict]): Movie documents.

    Returns:
        int: Number of inserted movies.
    """
    inserted = 0
    for movie in movies:
        if store.find_one(MOVIES_COLLECTION, {"Title": movie.get("Title")}):
            continue
        store.insert_one(MOVIES_COLLECTION, movie)
        inserted += 1
    logger.info("Seeded %d movies", inserted)
    return inserted
