"""
Task Board — Entry Point.

Single entry point: `python main.py` starts the board API server.
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

import uvicorn

from taskboard.api.app import create_app
from taskboard.config import settings

if __name__ == "__main__":
    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT)
