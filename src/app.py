"""Doorstep FastAPI application.

Serves the delivery client: carts, checkout, order tracking and delivery
estimates. Commands are processed synchronously within the HTTP request,
inside the delivery domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# PROTEAN_ENV selects the config overlay applied by init().
from delivery.domain import delivery  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

delivery.init()

_DOMAIN_ROUTE_PREFIXES = ("/carts", "/orders", "/geo")

app = FastAPI(
    title="Doorstep API",
    description="Delivery client backend: carts, orders and delivery estimates",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ValidationError -> 400, ObjectNotFoundError -> 404
register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Run domain routes inside the delivery domain context."""
    if not request.url.path.startswith(_DOMAIN_ROUTE_PREFIXES):
        return await call_next(request)

    with delivery.domain_context():
        return await call_next(request)


from delivery.api.routes import cart_router, geo_router, order_router  # noqa: E402

app.include_router(cart_router)
app.include_router(order_router)
app.include_router(geo_router)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": delivery.name})
