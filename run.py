#!/usr/bin/env python3
"""
ATM System Entry Point

Starts the FastAPI server with the registry seeded from configuration.
"""

import sys

import uvicorn

from atm_banking.api import create_app
from atm_banking.api.auth import ATMSystem
from atm_banking.config import get_config
from atm_banking.logging_config import setup_logging


if __name__ == "__main__":
    config = get_config()
    logger = setup_logging(config.log_level, config.log_format)

    try:
        system = ATMSystem(config)
        logger.info(f"Registry ready with {len(system.registry.list_accounts())} accounts")
        uvicorn.run(
            create_app(system),
            host=config.api_host,
            port=config.api_port,
            log_level=config.log_level.lower()
        )
    except KeyboardInterrupt:
        print("\nThank you for using ATM System. Goodbye!")
    except Exception as e:
        logger.exception(f"Error starting server: {e}")
        sys.exit(1)
