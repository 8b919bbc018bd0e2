import time
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .errors import InvalidLineItem, InvalidPayment, NotFound, TillError, TransactionFrozen
from .logs import json_log
from .routers.cart import router as cart_router
from .routers.items import router as items_router
from .routers.transactions import router as transactions_router

app = FastAPI(title="Till POS API", version=settings.api_version)

ERROR_STATUS = {
    NotFound: 404,
    TransactionFrozen: 409,
    InvalidLineItem: 400,
    InvalidPayment: 400,
}


def _current_request_id(req: Request) -> str:
    return getattr(req.state, "request_id", "") or req.headers.get("x-request-id") or "startup"


def status_for(exc: TillError) -> int:
    for cls, code in ERROR_STATUS.items():
        if isinstance(exc, cls):
            return code
    return 400


@app.exception_handler(TillError)
def _till_error(_req: Request, exc: TillError):
    return JSONResponse(status_code=status_for(exc), content={"detail": exc.detail, "kind": type(exc).__name__})


@app.exception_handler(RequestValidationError)
def _request_validation_error(_req: Request, exc: Exception):
    content = {"detail": "validation failed"}
    if settings.expose_errors and hasattr(exc, "errors"):
        content["errors"] = exc.errors()
    return JSONResponse(status_code=422, content=content)


@app.exception_handler(Exception)
def _unhandled_exception(req: Request, exc: Exception):
    rid = _current_request_id(req)
    json_log(
        "error",
        "http.request.unhandled",
        request_id=rid,
        method=req.method,
        path=req.url.path,
        error=str(exc),
    )
    content = {"detail": "internal error", "request_id": rid}
    if settings.expose_errors:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# Correlation id + basic structured request logging.
@app.middleware("http")
async def _request_logging(request: Request, call_next):
    rid = (request.headers.get("X-Request-Id") or "").strip() or uuid.uuid4().hex
    request.state.request_id = rid
    started = time.time()
    path = request.url.path
    method = request.method

    try:
        response = await call_next(request)
    except Exception as exc:
        dur_ms = int((time.time() - started) * 1000)
        json_log("error", "http.request.error", request_id=rid, method=method, path=path, duration_ms=dur_ms, error=str(exc))
        raise

    response.headers["X-Request-Id"] = rid
    if path != "/health":
        dur_ms = int((time.time() - started) * 1000)
        json_log(
            "info",
            "http.request",
            request_id=rid,
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=dur_ms,
        )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"ok": True, "version": settings.api_version, "store": settings.store_path}


app.include_router(items_router)
app.include_router(cart_router)
app.include_router(transactions_router)
