# Main application file



import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

import chemist.models.registry  # noqa: F401  (registers every table)
from chemist.core.config import settings
from chemist.core.exceptions import ChemistError, ValidationError
from chemist.core.rate_limiter import limiter
from chemist.routers import (
    auth,
    users,
    medicines,
    suppliers,
    sales,
    reports,
    settings as admin_settings,
    internal_admin,
)


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("chemist")


# APP INIT

app = FastAPI(
    title="Chemist POS API",
    description="Point of sale and inventory for a pharmacy: medicines, suppliers, intake and sales",
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

@app.exception_handler(ChemistError)
async def chemist_error_handler(request: Request, exc: ChemistError):
    if exc.status_code >= 409:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")

    content = {"detail": exc.message}

    if isinstance(exc, ValidationError) and exc.field:
        content["field"] = exc.field

    return JSONResponse(status_code=exc.status_code, content=content)


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
app.include_router(users.router)
app.include_router(medicines.router)
app.include_router(suppliers.router)
app.include_router(sales.router)
app.include_router(reports.router)
app.include_router(admin_settings.router)
app.include_router(internal_admin.router)



# ROOT

@app.get("/")
def root():
    logger.info("Health check endpoint called")
    return {"message": "Chemist POS API is running"}
