"""Entry point for running the scrim bot server."""

import argparse
import asyncio
import logging

from .config import DEFAULT_CONFIG_PATH, BotConfig
from .core.server import VERSION, run_server


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Scrim bot server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with config.json from the current directory
  python -m scrimbot

  # Use another config file and data directory
  python -m scrimbot --config /etc/scrimbot/config.json --data-dir /var/lib/scrimbot

  # Run with SSL (WSS)
  python -m scrimbot --port 8443 --ssl-cert cert.pem --ssl-key key.pem
""",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the JSON config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--host", help="Host address to bind to (overrides config)")
    parser.add_argument("--port", type=int, help="Port number to listen on (overrides config)")
    parser.add_argument(
        "--ssl-cert",
        dest="ssl_cert",
        help="Path to SSL certificate file (enables WSS)",
    )
    parser.add_argument(
        "--ssl-key",
        dest="ssl_key",
        help="Path to SSL private key file",
    )
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        help="Directory holding riot_ids.json, teamnames.json and maps.json",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args()

    # Validate SSL arguments
    if (args.ssl_cert and not args.ssl_key) or (args.ssl_key and not args.ssl_cert):
        parser.error("Both --ssl-cert and --ssl-key must be provided together")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = BotConfig.load(args.config)
    except ValueError as e:
        parser.error(f"Invalid config file {args.config}: {e}")

    overrides = {
        key: value
        for key, value in (
            ("host", args.host),
            ("port", args.port),
            ("ssl_cert", args.ssl_cert),
            ("ssl_key", args.ssl_key),
            ("data_dir", args.data_dir),
        )
        if value is not None
    }
    if overrides:
        config = BotConfig.from_dict({**config.to_dict(), **overrides})

    protocol = "wss" if config.ssl_cert else "ws"
    print(f"Starting scrimbot v{VERSION} on {protocol}://{config.host}:{config.port}")

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
