"""
EvalMax - Entry Point.

Headless ASGI application for uvicorn execution.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000 --reload

Or run directly:
    python main.py
"""

import os

import uvicorn

from core.logging_config import setup_logging
from core.server import create_app
from modules.evaluation.core.config import get_evaluation_settings

# Setup logging first
setup_logging(get_evaluation_settings().log_level)

# Export for uvicorn
app = create_app()


def main() -> None:
    """Run the application directly with uvicorn."""
    host = os.environ.get("SERVER_HOST", "127.0.0.1")
    port = int(os.environ.get("SERVER_PORT", "8000"))
    debug = os.environ.get("APP_DEBUG", "").lower() in ("true", "1", "yes")

    uvicorn_config = {
        "host": host,
        "port": port,
        "reload": debug,
        "log_level": "warning",  # Suppress uvicorn info logs
        "access_log": False,
    }

    # If reload is enabled, exclude logs and cache directories
    if debug:
        uvicorn_config["reload_excludes"] = [
            "logs/*",
            "**/__pycache__/*",
            "**/*.pyc",
            ".venv/*",
            "*.log",
        ]

    uvicorn.run("main:app", **uvicorn_config)


if __name__ == "__main__":
    main()
