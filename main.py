"""
Production entrypoint for the DreamKeys API.

Binds to 0.0.0.0:$PORT.
"""

import uvicorn

from utils.config import Config
from utils.logging_config import setup_logging

if __name__ == "__main__":
    config = Config.load()
    setup_logging(config.log_level, config.log_format)

    # Import app here to ensure clean module loading
    from web.app import create_app

    print(f"Starting DreamKeys API on port {config.port}")
    uvicorn.run(create_app(config), host="0.0.0.0", port=config.port, log_config=None)
