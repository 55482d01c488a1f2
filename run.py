"""Entry point for serving the Student Registry API.

Starts the FastAPI application with uvicorn.  Host and port come from
the ``HOST`` and ``PORT`` environment variables (defaults ``0.0.0.0``
and ``8000``); every other option is read by ``core.config`` as usual,
e.g. ``DATABASE_URL`` or ``STORE_BACKEND``.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from student_registry.app.core.config import settings
from student_registry.app.main import app


async def main() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info("Serving %s on %s:%s", settings.project_name, settings.host, settings.port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
