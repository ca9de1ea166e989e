from flask import Blueprint, current_app, jsonify

from myflix_api.api_auth.auth_functions import login_required_if
from myflix_api.api_movies.movies_functions import get_director, get_genre, get_movie_by_title, list_movies
from myflix_api.extensions import get_cache, get_store

movies_bp = Blueprint("movies", __name__)


@movies_bp.route("/movies", methods=["GET"])
@login_required_if("MOVIES_REQUIRE_AUTH")
def get_movies():
    """
    Handle GET requests for the movies list.

    Returns:
        Response: Flask response with JSON payload.
    """
    movies = list_movies(get_store(), get_cache(), current_app.config["CACHE_TTL_SECONDS"])
    return jsonify({"message": "List of all movies", "movies": movies})


@movies_bp.route("/movies/<title>", methods=["GET"])
@login_required_if("MOVIES_REQUIRE_AUTH")
def get_movie_detail(title: str):
    """
    Handle GET requests for a movie document.

    Args:
        title (str): Exact movie title from the path segment.

    Returns:
        Response: Flask response with JSON payload and status code.
    """
    movie = get_movie_by_title(title, get_store(), get_cache(), current_app.config["CACHE_TTL_SECONDS"])
    return jsonify({"message": "Movie details:", "movie": movie})


@movies_bp.route("/genres/<name>", methods=["GET"])
@login_required_if("MOVIES_REQUIRE_AUTH")
def get_genre_detail(name: str):
    """
    Handle GET requests for a genre and the movies that share it.

    Args:
        name (str): Genre name from the path segment.

    Returns:
        Response: Flask response with the genre summary.
    """
    genre = get_genre(name, get_store(), get_cache(), current_app.config["CACHE_TTL_SECONDS"])
    return jsonify({"message": "Genre details:", "genre": genre})


@movies_bp.route("/directors/<name>", methods=["GET"])
@login_required_if("MOVIES_REQUIRE_AUTH")
def get_director_detail(name: str):
    director = get_director(name, get_store(), get_cache(), current_app.config["CACHE_TTL_SECONDS"])
    return jsonify({"message": "Director details:", "director": director})
