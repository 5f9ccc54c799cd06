#!/usr/bin/env python3
"""
plm-bridge: web shell

Starts the HTTP shell over the PLM bridge facade. Configure the backend with
PLM_BRIDGE_ENDPOINT (or PLM_BRIDGE_MOCK_MODE=1) in the environment or a .env
file.

Usage:
    python plm-bridge-web.py [--port 8000] [--host 127.0.0.1] [--log-level INFO]
"""

from web.__main__ import main


if __name__ == "__main__":
    main()
