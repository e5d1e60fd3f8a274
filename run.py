#!/usr/bin/env python3
"""
Bank Ledger Entry Point

Starts the FastAPI server with a fresh in-memory ledger.
"""

import sys

from bank_ledger.api import run_server
from bank_ledger.config import get_config
from bank_ledger.logging_config import setup_logging


if __name__ == "__main__":
    config = get_config()
    setup_logging(config.log_level, config.log_format)

    print("Starting Bank Ledger...")
    print(f"API available at: http://{config.api_host}:{config.api_port}")
    print(f"Documentation at: http://{config.api_host}:{config.api_port}/docs")
    print()

    try:
        run_server(host=config.api_host, port=config.api_port)
    except KeyboardInterrupt:
        print("\nShutting down Bank Ledger...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
