import logging
import time

import redis
from flask import Flask, g, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from myflix_api.api_auth.auth import auth_bp
from myflix_api.api_movies.movies import movies_bp
from myflix_api.api_users.users import users_bp
from myflix_api.errors import ApiError
from myflix_api.extensions import CACHE_KEY, STORE_KEY, USERS_COLLECTION
from myflix_api.storage import MongoDocumentStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str):
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_cache(config):
    """
    Create the Redis client used for the movie cache.

    Args:
        config (Config): Flask config.

    Returns:
        Redis | None: Client, or None when caching is disabled.
    """
    if not config["CACHE_ENABLED"]:
        return None
    return redis.Redis(
        host=config["REDIS_HOST"],
        port=config["REDIS_PORT"],
        db=config["REDIS_DB"],
    )


def register_cors(app: Flask):
    """
    Only let browsers on the allow-list call the API.

    Requests without an ``Origin`` header (curl, mobile apps, server to
    server) are not affected.
    """
    allowed = app.config["ALLOWED_ORIGINS"]
    CORS(app, origins=allowed)

    @app.before_request
    def reject_unknown_origin():
        origin = request.headers.get("Origin")
        if origin and origin not in allowed:
            logger.warning("Blocked request from origin %s", origin)
            message = f"The CORS policy for this application doesn't allow access from origin {origin}"
            return jsonify({"error": message}), 403
        return None


def register_request_logging(app: Flask):
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get("request_started")
        duration_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info("%s %s %s %.3f ms", request.method, request.path, response.status_code, duration_ms)
        return response


def register_error_handlers(app: Flask):
    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        return jsonify(error.to_payload()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return error

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return "Oh no, it looks like something went wrong!", 500


def create_app(config: dict | None = None, store=None, cache=None):
    """
    Build the Flask application.

    Args:
        config (dict | None): Overrides applied on top of ``myflix_api.config``.
        store (DocumentStore | None): Storage to use, MongoDB when omitted.
        cache (Redis | None): Cache client, built from the config when omitted.

    Returns:
        Flask: Configured application.
    """
    app = Flask(__name__, static_folder="public", static_url_path="")
    app.json.sort_keys = False
    app.config.from_object("myflix_api.config")
    if config:
        app.config.update(config)

    configure_logging(app.config["LOG_LEVEL"])

    if store is None:
        store = MongoDocumentStore(app.config["MONGO_URI"], app.config["MONGO_DB"])
    store.ensure_unique(USERS_COLLECTION, "Username")
    app.extensions[STORE_KEY] = store
    app.extensions[CACHE_KEY] = cache if cache is not None else build_cache(app.config)

    register_cors(app)
    register_request_logging(app)
    register_error_handlers(app)

    @app.route("/", methods=["GET"])
    def welcome():
        return "Welcome to my movie database!"

    app.register_blueprint(auth_bp)
    app.register_blueprint(movies_bp)
    app.register_blueprint(users_bp)
    return app
