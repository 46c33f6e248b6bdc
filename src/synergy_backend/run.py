import logging
import os
import sys

import uvicorn

from synergy_backend.server import init_schema
from synergy_backend.settings import settings


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to log output."""

    # ANSI color codes
    grey = "\x1b[38;21m"
    green = "\x1b[32m"
    yellow = "\x1b[33m"
    red = "\x1b[31m"
    bold_red = "\x1b[31;1m"
    orange = "\x1b[38;5;208m"
    reset = "\x1b[0m"

    COLORS = {
        logging.DEBUG: grey,
        logging.INFO: green,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red
    }

    def format(self, record):
        formatted = super().format(record)

        # Only colorize if outputting to terminal
        if sys.stdout.isatty():
            log_color = self.COLORS.get(record.levelno, self.grey)

            # Format is: "timestamp - LEVEL - name - message"
            parts = formatted.split(' - ', 3)
            if len(parts) >= 3:
                timestamp = parts[0]
                level = parts[1]
                rest = ' - '.join(parts[2:])
                formatted = f"{self.orange}{timestamp}{self.reset} - {log_color}{level}{self.reset} - {rest}"

        return formatted


def setup_logging():
    """Configure root logging with colors and datetime."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColoredFormatter(
        '%(asctime)s - %(levelname)-8s - %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root.addHandler(handler)
    root.setLevel(logging.WARNING)


def configure_module_logging() -> str:
    """Apply WEBSOCKET_LOG_LEVEL to the realtime loggers and keep the rest quiet."""
    ws_log_level = os.environ.get("WEBSOCKET_LOG_LEVEL", "WARNING").upper()

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if ws_log_level not in valid_levels:
        ws_log_level = "WARNING"

    # Everything under synergy_backend defaults to WARNING
    logging.getLogger("synergy_backend").setLevel(logging.WARNING)
    logging.getLogger("synergy_backend.websocket").setLevel(getattr(logging, ws_log_level))

    # Suppress access logs in quiet mode
    if ws_log_level in ["ERROR", "CRITICAL"]:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return ws_log_level


def build_log_config(uvicorn_log_level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colored": {
                "()": ColoredFormatter,
                "fmt": "%(asctime)s - %(levelname)-8s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "colored",
                "stream": "ext://sys.stdout"
            },
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": uvicorn_log_level.upper(),
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": uvicorn_log_level.upper(),
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["default"],
                "level": "INFO" if uvicorn_log_level != "error" else "WARNING",
                "propagate": False
            }
        }
    }


def main():
    setup_logging()
    ws_level = configure_module_logging()

    uvicorn_log_level = os.environ.get("UVICORN_LOG_LEVEL", "info").lower()
    logging.getLogger(__name__).warning(
        f"Starting server with WebSocket log level: {ws_level}, Uvicorn log level: {uvicorn_log_level}"
    )

    if settings.DEBUG_MODE != "production":
        init_schema()

    uvicorn.run(
        "synergy_backend.server:create_app",
        factory=True,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
        log_config=build_log_config(uvicorn_log_level),
        reload=settings.DEBUG_MODE != "production",
        workers=1
    )


if __name__ == "__main__":
    main()
