"""Punto de entrada de línea de comandos: `ruuvi-ingest`."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import pprint
import socket
import sys
from typing import List, Optional

import uvicorn

from common.config import ConfigError, get_settings, load_tag_config

from .core.codec import decode, to_physical
from .core.domain.errors import DecodeError
from .main import create_app

logger = logging.getLogger(__name__)


def _build_parser(defaults) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ruuvi-ingest",
        description="Receives Ruuvi Station and Ruuvi Gateway HTTP updates and exports them to Prometheus.",
    )
    parser.add_argument("--port", type=int, default=defaults.port, help="Port to listen on.")
    parser.add_argument("--host", default=defaults.host, help="Address to bind to.")
    parser.add_argument("--debug", action="store_true", default=defaults.debug,
                        help="Log every request and show the last payload on the index page.")
    parser.add_argument("--config", default=defaults.config_file,
                        help="YAML configuration file with tag name overrides, optional.")
    parser.add_argument("--decode-data", default="", metavar="HEX",
                        help="Decode the given hex-encoded bluetooth advertisement and exit. For debugging.")
    return parser


def decode_data(hex_data: str) -> int:
    """Decodifica un anuncio BLE en hex y lo imprime; 1 si falla."""
    try:
        advertisement = decode(hex_data)
    except DecodeError as e:
        print(f"decoding failure: {e}", file=sys.stderr)
        return 1

    print(pprint.pformat(advertisement))
    print(pprint.pformat(dataclasses.asdict(to_physical(advertisement.sample))))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    args = _build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    if args.decode_data:
        return decode_data(args.decode_data)

    settings = dataclasses.replace(
        settings,
        host=args.host,
        port=args.port,
        debug=args.debug,
        config_file=args.config,
    )

    try:
        tag_config = load_tag_config(settings.config_file)
    except ConfigError as e:
        logger.error("[CONFIG] %s", e)
        return 1

    app = create_app(settings, tag_config)
    logger.info("Listening on http://%s:%d", socket.gethostname(), settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
