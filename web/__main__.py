"""
Entry point for running the bridge web shell as a module.

Usage:
    python -m web [--port 8000] [--host 127.0.0.1] [--reload] [--log-level INFO]
"""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from plm_platform.config import LOG_LEVEL_ENV, LOG_LEVELS, resolve_log_level


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="plm-bridge: HTTP shell over the PLM backend"
    )
    parser.add_argument(
        "--port", type=int, default=8000,
        help="Port to serve on (default: 8000)"
    )
    parser.add_argument(
        "--host", type=str, default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--reload", action="store_true",
        help="Enable auto-reload for development"
    )
    parser.add_argument(
        "--log-level", type=str.upper, default=resolve_log_level(),
        choices=LOG_LEVELS,
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or INFO)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"\n  plm-bridge: web shell")
    print(f"  Listening on http://{args.host}:{args.port}\n")

    uvicorn.run(
        "web.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
