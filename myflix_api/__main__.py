import argparse
import json
import logging

from myflix_api import config
from myflix_api.api_movies.movies_functions import seed_movies
from myflix_api.app import create_app
from myflix_api.extensions import STORE_KEY

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Run the myFlix API server.")
    parser.add_argument("--seed", metavar="FILE", help="JSON file with a list of movies to insert before serving")
    parser.add_argument("--host", default=config.HOST)
    parser.add_argument("--port", type=int, default=config.PORT)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    app = create_app()
    if args.seed:
        with open(args.seed, encoding="utf-8") as handle:
            movies = json.load(handle)
        seed_movies(app.extensions[STORE_KEY], movies)

    logger.info("Server is running on port %s", args.port)
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
