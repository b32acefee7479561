"""Access log server — records every HTTP request to a CSV file and serves it at /logs."""

import logging
import os
import sys
from argparse import ArgumentParser

from app import create_app
from config import Config

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="access-log-server",
        description="HTTP server that keeps a CSV access log and serves it as JSON.",
    )
    parser.add_argument(
        "--config",
        default=os.environ.get("CONFIG_PATH", "config.yaml"),
        help="YAML config file (default: $CONFIG_PATH or config.yaml)",
    )
    parser.add_argument("--host", help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, help="Listen port (overrides config)")
    parser.add_argument("--log-path", help="Access log CSV path (overrides config)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = Config(args.config)

    if args.host:
        config["server"]["host"] = args.host
    if args.port is not None:
        config["server"]["port"] = args.port
    if args.log_path:
        config["storage"]["path"] = args.log_path

    logging.basicConfig(
        level=getattr(logging, str(config["logging"]["level"]).upper(), logging.INFO),
        format="%(asctime)s [access-log] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    app = create_app(config)
    server = config["server"]
    logger.info(
        "Starting on %s:%d, access log at %s",
        server["host"], server["port"], config["storage"]["path"],
    )

    try:
        app.run(host=server["host"], port=server["port"], debug=server["debug"],
                threaded=True, use_reloader=False)
    finally:
        app.config["components"]["access_log"].shutdown()
        logger.info("Shut down cleanly")


if __name__ == "__main__":
    main()
