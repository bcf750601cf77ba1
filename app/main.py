# Main application file

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.database import engine, Base
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.rate_limiter import limiter
from app.routers import (
    auth,
    setup,
    users,
    settings as store_settings,
    categories,
    products,
    toppings,
    checkout,
    sales,
    purchases,
    reports,
    exports,
    changes,
)


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("app")


# DATABASE
# Routers import every model, so the metadata is complete here.
# Alembic migrations are the way to evolve an existing database.

Base.metadata.create_all(bind=engine)


# APP INIT

app = FastAPI(
    title="Smart Seller POS API",
    description="Point-of-sale backend: catalog, checkout, sales, purchases and profit reports",
    version="1.0.0",
)


# CORS (Token-based auth)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# DOMAIN ERRORS

register_exception_handlers(app)


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} "
        f"Time: {duration}ms"
    )

    return response


# ROUTERS

app.include_router(auth.router)
app.include_router(setup.router)
app.include_router(users.router)
app.include_router(store_settings.router)
app.include_router(categories.router)
app.include_router(products.router)
app.include_router(toppings.router)
app.include_router(checkout.router)
app.include_router(sales.router)
app.include_router(purchases.router)
app.include_router(reports.router)
app.include_router(exports.router)
app.include_router(changes.router)


# ROOT

@app.get("/")
def root():
    logger.info("Health check endpoint called")
    return {"message": "Smart Seller POS API is running"}
