from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import Optional

import httpx

# Import the conversion router
from reformat.router import router as convert_router

from reformat.config import Settings, get_settings
from reformat.session import SessionRegistry
from reformat.utils.mime_detector import MimeTypeDetector

# Import centralized error handling
from reformat.utils.error_handling import ReformatError, reformat_error_handler

# Import HTTP client factory
from reformat.utils.http_client import HTTPClientFactory, lifespan_http_client

# Import centralized logging configuration
from reformat.utils.logging_config import get_logger


# Set up logging
logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """
    Build the Reformat application.

    Args:
        settings: Service settings (defaults to the environment)
        transport: Optional httpx transport for the conversion client, used by tests
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager owning the conversion client."""
        factory = HTTPClientFactory(settings)
        overrides = {"transport": transport} if transport is not None else {}
        async with lifespan_http_client(factory, **overrides) as client:
            app.state.client = client
            logger.info(f"Conversion endpoint: {settings.conversion_url}")
            yield

    app = FastAPI(title="Reformat", lifespan=lifespan)
    app.state.settings = settings
    app.state.sessions = SessionRegistry(MimeTypeDetector(settings.max_file_size))

    app.add_exception_handler(ReformatError, reformat_error_handler)
    app.include_router(convert_router)

    @app.get("/ping")
    async def general_ping():
        return {"success": True, "data": "PONG!"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8369)
