"""Request middleware and body validation helpers."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import pydantic
from aiohttp import web

from vtrim.exceptions import VTrimError
from vtrim.server.api.errors import (
    INTERNAL_ERROR,
    INVALID_JSON,
    VALIDATION_FAILED,
    api_error,
    error_for_exception,
)

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
RouteSpec = tuple[str, str, Handler]
"""(method, path suffix below /api, handler)."""
ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


class RequestBodyError(Exception):
    """Raised when a JSON body is missing, malformed or fails validation."""

    def __init__(self, response: web.Response) -> None:
        super().__init__("invalid request body")
        self.response = response


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """Turn exceptions raised by handlers into JSON error responses.

    aiohttp's own HTTP exceptions (404 for unknown routes, 405) pass
    through untouched.
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except RequestBodyError as e:
        return e.response
    except VTrimError as e:
        response = error_for_exception(e)
        if response.status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, e)
        else:
            logger.info("%s %s rejected: %s", request.method, request.path, e)
        return response
    except Exception:
        logger.exception("Unhandled error in %s %s", request.method, request.path)
        return api_error("Internal server error", code=INTERNAL_ERROR, status=500)


async def parse_json_body(request: web.Request, model: type[ModelT]) -> ModelT:
    """Read and validate a JSON request body.

    Raises:
        RequestBodyError: Carrying an INVALID_JSON or VALIDATION_FAILED
            response.
    """
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise RequestBodyError(
            api_error("Invalid JSON payload", code=INVALID_JSON)
        ) from None

    if not isinstance(data, dict):
        raise RequestBodyError(
            api_error("Request body must be a JSON object", code=INVALID_JSON)
        )

    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        details = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        message = details[0]["message"] if details else "Invalid request"
        raise RequestBodyError(
            api_error(message, code=VALIDATION_FAILED, details=details)
        ) from None
