import logging

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

from core.config import SECRET_KEY, CORS_ALLOWED_ORIGIN, LOG_LEVEL, VERSE_ID_SCHEME
from routes.references_api import references_bp
from services.references import get_scheme

load_dotenv()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def create_app() -> Flask:
    app = Flask(__name__)
    app.config["SECRET_KEY"] = SECRET_KEY

    # Raises ValueError for an unknown scheme name
    app.config["VERSE_ID_SCHEME"] = get_scheme(VERSE_ID_SCHEME).name

    CORS(app, origins=CORS_ALLOWED_ORIGIN)

    # Register blueprints
    app.register_blueprint(references_bp)

    return app


app = create_app()

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5055)
