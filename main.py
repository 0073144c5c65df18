"""
main.py — quiz server entry point
"""

import logging
import os
import sys

from config import BASE_DIR, DATA_DIR, DEFAULT_HOST, DEFAULT_PORT, LOG_FILE

# ── Logging ───────────────────────────────────────────────────────────────────

def configure_logging() -> None:
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            handlers=[
                logging.FileHandler(LOG_FILE, encoding='utf-8'),
                logging.StreamHandler(sys.stdout)
            ]
        )
    except PermissionError:
        # Log file not writable: console only
        logging.basicConfig(level=logging.INFO)


logger = logging.getLogger(__name__)

# ── Main ──────────────────────────────────────────────────────────────────────

def run() -> None:
    configure_logging()
    logger.info("=== Classroom Quiz server starting ===")
    os.chdir(BASE_DIR)
    os.makedirs(DATA_DIR, exist_ok=True)

    import uvicorn
    from api.app import create_app

    logger.info(f"Uvicorn listening on http://{DEFAULT_HOST}:{DEFAULT_PORT}")
    try:
        uvicorn.run(create_app(), host=DEFAULT_HOST, port=DEFAULT_PORT, log_level="info")
    except KeyboardInterrupt:
        logger.info("Stopped by user.")


if __name__ == "__main__":
    run()
