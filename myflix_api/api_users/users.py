from flask import Blueprint, current_app, jsonify, request

from myflix_api.api_auth.auth_functions import current_username, login_required, login_required_if, owner_required
from myflix_api.api_users.users_functions import (
    add_favorite,
    delete_user,
    get_user,
    list_favorites,
    list_users,
    register_user,
    remove_favorite,
    serialize_user,
    update_user,
)
from myflix_api.errors import Forbidden, NotFound
from myflix_api.extensions import get_store

users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.route("/register", methods=["POST"])
def create_user():
    """
    Handle POST requests that create user accounts.

    Returns:
        Response: Flask response with the created record or an error payload.
    """
    payload = request.get_json(silent=True)
    created = register_user(payload, get_store(), current_app.config["BCRYPT_ROUNDS"])
    return jsonify(serialize_user(created)), 201


@users_bp.route("/all", methods=["GET"])
@login_required_if("USERS_LIST_REQUIRES_AUTH")
def get_all_users():
    """
    Handle GET requests for the users collection.

    Returns:
        Response: Flask response with every user.
    """
    return jsonify([serialize_user(user) for user in list_users(get_store())])


@users_bp.route("/<Username>", methods=["GET"])
@login_required
def get_user_detail(Username: str):
    """
    Handle GET requests for a single user record.

    Args:
        Username (str): Username taken from the path segment.

    Returns:
        Response: Flask response with user data or error payload.
    """
    return jsonify(serialize_user(get_user(Username, get_store())))


@users_bp.route("/update/<Username>", methods=["PUT"])
@login_required
def update_user_detail(Username: str):
    """
    Handle PUT requests that replace a user's account fields.

    Args:
        Username (str): Username taken from the path segment.

    Returns:
        Response: Flask response with the updated user or error payload.
    """
    payload = request.get_json(silent=True)
    try:
        updated = update_user(
            Username,
            current_username(),
            payload,
            get_store(),
            current_app.config["BCRYPT_ROUNDS"],
        )
    except Forbidden as exc:
        return jsonify(exc.to_payload()), 400
    return jsonify(serialize_user(updated))


@users_bp.route("/remove/<Username>", methods=["DELETE"])
@owner_required("Username")
def remove_user(Username: str):
    """
    Handle DELETE requests that remove user accounts.

    Args:
        Username (str): Username taken from the path segment.

    Returns:
        Response: Plain text delete status.
    """
    try:
        delete_user(Username, get_store())
    except NotFound:
        return f"{Username} was not found", 400
    return f"{Username} was deleted.", 200


@users_bp.route("/<Username>/favorites", methods=["GET"])
@login_required
def get_user_favorites(Username: str):
    """
    Handle GET requests for the movie ids a user marked as favorite.

    Args:
        Username (str): Owner of the favorites.

    Returns:
        Response: Flask response with the list of movie ids.
    """
    return jsonify(list_favorites(Username, get_store()))


@users_bp.route("/<Username>/favorites/<MovieID>", methods=["POST"])
@users_bp.route("/<Username>/favorites/add/<MovieID>", methods=["POST"])
@owner_required("Username")
def add_user_favorite(Username: str, MovieID: str):
    """
    Handle POST requests that add a movie to a user's favorites.

    Args:
        Username (str): Owner of the favorites.
        MovieID (str): Movie identifier from the path.

    Returns:
        Response: Flask response with the updated user.
    """
    return jsonify(serialize_user(add_favorite(Username, MovieID, get_store())))


@users_bp.route("/<Username>/favorites/<MovieID>", methods=["DELETE"])
@users_bp.route("/<Username>/favorites/remove/<MovieID>", methods=["DELETE"])
@owner_required("Username")
def remove_user_favorite(Username: str, MovieID: str):
    """
    Handle DELETE requests that remove a movie from a user's favorites.

    Args:
        Username (str): Owner of the favorites.
        MovieID (str): Movie identifier from the path.

    Returns:
        Response: Flask response with the updated user.
    """
    return jsonify(serialize_user(remove_favorite(Username, MovieID, get_store())))
