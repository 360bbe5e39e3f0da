"""Entrypoint: python -m score_publisher"""
from __future__ import annotations

from typing import Any

import uvicorn

from score_publisher.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s]: %(message)s"


def build_log_config(level: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {
                "()": "score_publisher.api.middleware.correlation_id.RequestIdLogFilter",
            },
        },
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["request_id"],
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": level, "propagate": False},
        },
        "root": {"handlers": ["default"], "level": level},
    }


def main() -> None:
    uvicorn.run(
        "score_publisher.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_config=build_log_config(settings.LOG_LEVEL),
    )


if __name__ == "__main__":
    main()
