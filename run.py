#!/usr/bin/env python3
"""
Run the DreamKeys marketplace API locally.
"""

import uvicorn

from utils.config import Config
from utils.logging_config import setup_logging


def main():
    """Start the web server."""
    config = Config.load()
    setup_logging(config.log_level, config.log_format)

    print(f"Starting DreamKeys API on http://{config.host}:{config.port}")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "web.app:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    main()
