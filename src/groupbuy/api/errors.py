"""Render group order errors as JSON with their own HTTP status."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from groupbuy.errors import GroupOrderError

logger = structlog.get_logger(__name__)


async def group_order_error_handler(request: Request, exc: GroupOrderError) -> JSONResponse:
    logger.info(
        "Request rejected",
        path=request.url.path,
        kind=exc.kind,
        message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    """Protean's handlers for generic domain errors plus ours for error kinds.

    Starlette resolves handlers along the exception's MRO, so error kinds
    (which are ValidationErrors) reach ``group_order_error_handler`` first.
    """
    register_exception_handlers(app)
    app.add_exception_handler(GroupOrderError, group_order_error_handler)
