"""Storefront ordering FastAPI application.

Serves checkout, the payment gateway webhook, delivery and admin endpoints.
Every request runs inside the ordering domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# Gateway settings are read from the environment once, here.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering  # noqa: E402
from ordering.gateway import configure_gateway, get_gateway_settings
from ordering.gateway.settings import GatewaySettings
from ordering.utils.logging import configure_logging

configure_logging()
ordering.init()
configure_gateway(GatewaySettings.from_env())

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Orders API",
    description="Order and payment lifecycle: checkout, gateway notifications, delivery and admin",
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
    """Push the ordering domain context for each request."""
    with ordering.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api.errors import register_error_handlers  # noqa: E402
from ordering.api.routes import (  # noqa: E402
    admin_router,
    checkout_router,
    delivery_router,
    order_router,
    payment_router,
)

app.include_router(checkout_router)
app.include_router(payment_router)
app.include_router(delivery_router)
app.include_router(admin_router)
app.include_router(order_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    settings = get_gateway_settings()
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"ordering": {"name": ordering.name}},
            "gateway": {"mode": settings.mode, "configured": settings.has_credentials},
        }
    )
