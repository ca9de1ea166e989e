import logging

from flask import Blueprint, current_app, jsonify, request

from myflix_api.api_auth.auth_functions import login
from myflix_api.api_users.users_functions import serialize_user
from myflix_api.extensions import get_store

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


def read_credentials():
    """
    Collect Username and Password from a JSON body, a form body or the query string.

    Returns:
        tuple[str, str]: Username and password, empty when absent.
    """
    payload = request.get_json(silent=True) or {}
    username = payload.get("Username") or request.form.get("Username") or request.args.get("Username") or ""
    password = payload.get("Password") or request.form.get("Password") or request.args.get("Password") or ""
    return str(username).strip(), str(password)


@auth_bp.route("/login", methods=["POST"])
def authenticate_user():
    """
    Handle POST requests for user authentication.

    Returns:
        Response: Flask response with the user and a session token, or an error payload.
    """
    username, password = read_credentials()
    if not username or not password:
        return jsonify({"error": "Username and password are required"}), 400

    config = current_app.config
    user, token = login(
        get_store(),
        username,
        password,
        config["JWT_SECRET"],
        config["JWT_TTL_SECONDS"],
        config["JWT_ALGORITHM"],
    )
    logger.info("User %s logged in", username)
    return jsonify({"user": serialize_user(user), "token": token})
