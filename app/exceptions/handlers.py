import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import UnknownProviderError

logger = logging.getLogger(__name__)


async def unknown_provider_error_handler(
    _request: Request, exc: UnknownProviderError,
) -> JSONResponse:
    logger.warning("Unknown provider requested: %s", exc.name)
    return JSONResponse(
        status_code=404,
        content={"detail": f"Unknown provider: {exc.name}"},
    )
