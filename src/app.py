"""Groupbuy FastAPI application.

Web server that processes group-order commands synchronously via HTTP.
Every request runs inside the Groupbuy domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from groupbuy/domain.toml:
#   - default/"test" -> event_processing = "sync"  (handlers fire on commit)
#   - "production"   -> event_processing = "async" (handlers fire via Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from groupbuy.domain import groupbuy
from groupbuy.utils.logging import bind_request_context, clear_request_context, configure_logging

configure_logging()
groupbuy.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Groupbuy API",
    description="Shared group orders, delivery routing and rider tracking",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Groupbuy domain context and bind request fields for logging."""
    clear_request_context()
    bind_request_context(
        request_id=request.headers.get("X-Request-Id") or uuid.uuid4().hex,
        user_id=request.headers.get("X-User-Id"),
    )
    with groupbuy.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from groupbuy.api import (  # noqa: E402
    delivery_router,
    notification_router,
    register_error_handlers,
    sandbox_router,
    shared_order_router,
)

app.include_router(shared_order_router)
app.include_router(delivery_router)
app.include_router(notification_router)
app.include_router(sandbox_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"groupbuy": {"name": groupbuy.name}},
        }
    )
