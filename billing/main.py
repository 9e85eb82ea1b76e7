import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .errors import BillingError
from .routes import api_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="billing")

app.include_router(api_router)


def _error_body(message: str, field: str | None) -> dict:
    body = {"error": message}
    if field:
        body["field"] = field
    return body


@app.exception_handler(BillingError)
def billing_error_handler(request: Request, exc: BillingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(exc.message, exc.field)
    )


@app.exception_handler(RequestValidationError)
def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(location) or None
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content=_error_body(f"{field}: {message}" if field else message, field),
    )


@app.get("/health", tags=["health"])
def health_check() -> dict:
    return {"status": "ok"}
