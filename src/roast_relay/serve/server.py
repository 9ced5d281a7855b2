"""Launch the relay under uvicorn."""
from __future__ import annotations
import logging
import sys

import uvicorn
from dotenv import load_dotenv

from roast_relay.common.config import load_settings
from roast_relay.common.errors import ConfigurationError
from roast_relay.common.logging_setup import setup_logging
from roast_relay.serve.fastapi_app import create_app

LOGGER = logging.getLogger("roastrelay.serve.server")

def main() -> None:
    load_dotenv()
    try:
        setup_logging()
        settings = load_settings()
    except ConfigurationError as e:
        LOGGER.critical("FATAL: %s", e.message)
        sys.exit(1)

    LOGGER.info("Gemini API key usable: %s", settings.has_usable_gemini_key)
    if not settings.has_usable_gemini_key:
        LOGGER.warning("GEMINI_API_KEY looks like a placeholder; /api/roast will answer 500")

    app = create_app(settings)
    LOGGER.info("Relay listening on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)

if __name__ == "__main__":
    main()
