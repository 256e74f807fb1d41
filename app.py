"""
Framegrab server entry point.

    python app.py            # serve on WEB_HOST:WEB_PORT
    framegrab                # same, via the installed console script
"""
from __future__ import annotations

import logging

from backend.src.infrastructure.config import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    import uvicorn

    settings = get_settings()
    host = settings.web.host
    port = settings.web.port

    logger.info("Starting Framegrab on %s:%d", host, port)

    uvicorn.run(
        "backend.src.adapters.inbound.fastapi_app:app",
        host=host,
        port=port,
        reload=settings.app_env == "development",
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
