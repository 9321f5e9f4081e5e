# Billing backend entrypoint: FastAPI app with the billing routers.

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api import batches
from backend.app.api import customers
from backend.app.api import invoices
from backend.app.api import payments
from backend.app.api import receipts
from backend.app.core.exceptions import BillingError, NotFoundError, StateError, ValidationError
from backend.app.core.logging import configure_logging
from backend.app.core.settings import get_settings
from backend.app.db.base import init_db

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.api_version)

app.include_router(customers.router)
app.include_router(invoices.router)
app.include_router(batches.router)
app.include_router(payments.router)
app.include_router(receipts.router)


def _error_response(status_code: int, exc: BillingError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "error": type(exc).__name__})


@app.exception_handler(NotFoundError)
async def not_found_handler(_: Request, exc: NotFoundError):
    return _error_response(404, exc)


@app.exception_handler(ValidationError)
async def validation_error_handler(_: Request, exc: ValidationError):
    return _error_response(422, exc)


@app.exception_handler(StateError)
async def state_error_handler(_: Request, exc: StateError):
    return _error_response(409, exc)


@app.get("/")
def read_root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def create_tables():
    init_db()
    logger.info("%s %s started (%s)", settings.app_name, settings.api_version, settings.environment)
