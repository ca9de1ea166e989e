import pytest
import redis

from myflix_api import create_app
from myflix_api.storage import InMemoryDocumentStore

TEST_SECRET = "test-secret"

MOVIES = [
    {
        "Title": "Spirited Away",
        "Description": "A girl wanders into a world of spirits.",
        "Genre": {"Name": "Fantasy", "Description": "Magic and the supernatural."},
        "Director": {"Name": "Hayao Miyazaki", "Bio": "Japanese animator."},
        "Actors": ["Rumi Hiiragi", "Miyu Irino"],
        "ImagePath": "spirited.png",
        "Featured": True,
    },
    {
        "Title": "Pan's Labyrinth",
        "Description": "A girl escapes into a dark fairy tale.",
        "Genre": {"Name": "Fantasy", "Description": "Fantasy, second description."},
        "Director": {"Name": "Guillermo del Toro", "Bio": "Mexican filmmaker."},
        "Actors": ["Ivana Baquero"],
        "ImagePath": "pan.png",
        "Featured": False,
    },
    {
        "Title": "Heat",
        "Description": "A detective hunts a crew of thieves.",
        "Genre": {"Name": "Crime", "Description": "Criminals and the people who chase them."},
        "Director": {"Name": "Michael Mann", "Bio": "American director."},
        "Actors": ["Al Pacino", "Robert De Niro"],
        "ImagePath": "heat.png",
        "Featured": False,
    },
    {
        "Title": "Princess Mononoke",
        "Description": "A prince is caught in a war between forest gods and humans.",
        "Genre": {"Name": "Adventure", "Description": "Journeys and quests."},
        "Director": {"Name": "Hayao Miyazaki", "Bio": "Bio from a later record."},
        "Actors": ["Yoji Matsuda"],
        "ImagePath": "mononoke.png",
        "Featured": False,
    },
]


class DictRedis:
    """Redis stand-in backed by a dict, covering the calls the cache makes."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value.encode("utf-8") if isinstance(value, str) else value
        self.ttls[key] = ttl


class BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("redis is down")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("redis is down")


@pytest.fixture
def store():
    return InMemoryDocumentStore({"movies": MOVIES})


@pytest.fixture
def app_config():
    return {
        "TESTING": True,
        "JWT_SECRET": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
        "CACHE_ENABLED": False,
        "MOVIES_REQUIRE_AUTH": True,
        "USERS_LIST_REQUIRES_AUTH": True,
        "ALLOWED_ORIGINS": ["http://localhost:1234"],
        "LOG_LEVEL": "DEBUG",
    }


@pytest.fixture
def app(app_config, store):
    return create_app(config=app_config, store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    def _register(username, password="secret1", email=None, **extra):
        body = {"Username": username, "Password": password, "Email": email or f"{username}@mail.com"}
        body.update(extra)
        return client.post("/users/register", json=body)

    return _register


@pytest.fixture
def auth_headers(client, register):
    """Register a user when needed, log in and return the bearer header."""

    def _auth_headers(username, password="secret1"):
        register(username, password)
        response = client.post("/login", json={"Username": username, "Password": password})
        assert response.status_code == 200, response.get_json()
        return {"Authorization": f"Bearer {response.get_json()['token']}"}

    return _auth_headers
