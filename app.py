import logging
import os

from flask import Flask, jsonify

from config import Config
from log_store import LogStore
from middleware import AccessLogMiddleware

logger = logging.getLogger(__name__)


def create_app(config=None):
    """Flask application factory."""
    app = Flask(__name__)

    if config is None:
        config = Config(os.environ.get("CONFIG_PATH", "config.yaml"))

    store = LogStore(config["storage"]["path"])
    if store.ensure_file():
        logger.info("Created access log %s", store.path)

    access_log = AccessLogMiddleware(
        app.wsgi_app, store, workers=config["writer"]["workers"]
    )
    app.wsgi_app = access_log

    # Store components on app for access in tests
    app.config["components"] = {
        "config": config,
        "store": store,
        "access_log": access_log,
    }

    # --- Routes ---

    @app.route("/")
    def index():
        return "ok", 200

    @app.route("/logs")
    def logs():
        try:
            entries = store.read_all()
        except OSError as e:
            logger.error("Error reading log file %s: %s", store.path, e)
            return jsonify({"error": "Internal Server Error"}), 500
        return jsonify([entry.to_dict() for entry in entries])

    return app
