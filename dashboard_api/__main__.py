"""
__main__.py – Run the dashboard API with uvicorn on HOST:PORT.

    python -m dashboard_api
"""
from __future__ import annotations

import logging

import uvicorn

from building_ops.config import get_config


def main() -> None:
    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("dashboard_api.main:app", host=config.host, port=config.port)


if __name__ == "__main__":
    main()
