"""Command-line entry point: ``paste-server [--addr HOST:PORT] [--cert PEM --key PEM]``.

TLS needs both a certificate and a key. Passing only one of them is refused
before anything binds.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import uvicorn

from .app import APP_VERSION, create_app
from .config import PasteSettings
from .observability import configure_logging

log = logging.getLogger("pastestore.cli")


def parse_addr(value: str) -> Tuple[str, int]:
    """Split ``host:port`` (``[v6]:port`` for IPv6) into its parts."""
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port:
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got {value!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port_num = int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port in {value!r}")
    if not 0 < port_num < 65536:
        raise argparse.ArgumentTypeError(f"port out of range in {value!r}")
    return host, port_num


def build_parser(settings: PasteSettings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="paste-server", description="Zero-knowledge encrypted paste server.")
    p.add_argument("--cert", type=Path, default=settings.PASTE_TLS_CERT, help="PEM certificate for HTTPS")
    p.add_argument("--key", type=Path, default=settings.PASTE_TLS_KEY, help="PEM private key for HTTPS")
    p.add_argument("--addr", type=parse_addr, default=settings.PASTE_ADDR,
                   help="listen address, HOST:PORT (default: %(default)s)")
    p.add_argument("--log-level", default=settings.PASTE_LOG_LEVEL, help="logging level (default: %(default)s)")
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return p


def resolve_tls(cert: Optional[Path], key: Optional[Path]) -> Optional[Tuple[Path, Path]]:
    """Return the (cert, key) pair, None for plain HTTP, or raise SystemExit(1)."""
    if cert and key:
        for path in (cert, key):
            if not path.is_file():
                log.error("Failed to load TLS certificate/key: %s is not a readable file", path)
                raise SystemExit(1)
        log.info("TLS enabled. Loading cert: %s, key: %s", cert, key)
        return cert, key
    if cert is None and key is None:
        log.warning(
            "TLS not configured: running in HTTP mode. Traffic is unencrypted and potentially "
            "tamperable. Provide --cert and --key to enable HTTPS."
        )
        return None
    log.error("Both --cert and --key must be provided for TLS, or neither for HTTP.")
    raise SystemExit(1)


def main(argv: Optional[List[str]] = None) -> int:
    settings = PasteSettings()
    args = build_parser(settings).parse_args(argv)
    configure_logging(args.log_level)

    tls = resolve_tls(args.cert, args.key)
    host, port = args.addr
    app = create_app(settings)

    ssl_kwargs = {}
    if tls:
        ssl_kwargs = {"ssl_certfile": str(tls[0]), "ssl_keyfile": str(tls[1])}

    log.info("Listening on %s://%s:%s", "https" if tls else "http", host, port)
    uvicorn.run(app, host=host, port=port, log_config=None, log_level=args.log_level.lower(), **ssl_kwargs)
    log.info("Server shutting down.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
