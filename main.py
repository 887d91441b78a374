# python main.py
# Same as: uvicorn services.safecircle.main:app --host 0.0.0.0 --port $PORT
import logging

import uvicorn

from common.constants import SERVICE_NAME, SERVICES
from libs.config import config

logger = logging.getLogger(__name__)


def main():
    module_path, default_port = SERVICES[SERVICE_NAME]
    port = config.PORT or default_port
    logger.info(
        "Starting %s on port %d (data dir %s, ElevenLabs configured: %s)",
        SERVICE_NAME,
        port,
        config.DATA_DIR,
        config.validate_elevenlabs_config(),
    )
    uvicorn.run(f"{module_path}:app", host="0.0.0.0", port=port, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    main()
