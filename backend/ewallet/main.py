import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ewallet.config import CORS_ORIGINS, LOG_LEVEL
from ewallet.errors import AuthenticationError, QueryCancelledError, StoreError, ValidationError
from ewallet.middleware.request_logging import log_requests
from ewallet.routers import transactions

# ── Logging setup ─────────────────────────────────────────────────────────────
# Always configure a stdout handler so logs appear in the local terminal.
# On Cloud Run (K_SERVICE is set), additionally route to Cloud Logging.

class _ExtraFormatter(logging.Formatter):
    """Formatter that appends extra={} fields to the log line for local visibility."""
    _BASE_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__)

    def format(self, record):
        msg = super().format(record)
        extras = {k: v for k, v in record.__dict__.items()
                  if k not in self._BASE_ATTRS and k not in ("message", "asctime")}
        if extras:
            msg += f" | {extras}"
        return msg

_handler = logging.StreamHandler()
_handler.setFormatter(_ExtraFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
logging.root.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))
logging.root.addHandler(_handler)

if os.environ.get("K_SERVICE"):
    # Running on Cloud Run: also send structured logs to Cloud Logging
    try:
        import google.cloud.logging
        cloud_logging_client = google.cloud.logging.Client()
        cloud_logging_client.setup_logging()
    except Exception as e:
        logging.warning("cloud_logging_setup_failed: %s", e)

logger = logging.getLogger(__name__)

# ── App ────────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="E-Wallet API",
    description="E-wallet backend: paginated, filterable transaction history over a relational store.",
    version="1.0.0",
)

# ── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Origin", "Authorization", "Content-Type"],
)
app.middleware("http")(log_requests)

# ── Routers ────────────────────────────────────────────────────────────────────
app.include_router(transactions.router, prefix="/api/transactions", tags=["transactions"])

# ── Exception handlers ─────────────────────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'query')}: {err.get('msg')}"
        for err in errors
    ) or "Invalid request"
    logger.info("request_binding_failed", extra={"path": request.url.path, "error": message})
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info("request_rejected", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"error": str(exc)})


@app.exception_handler(QueryCancelledError)
async def query_cancelled_handler(request: Request, exc: QueryCancelledError):
    logger.warning("request_timed_out", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=504, content={"error": "Request timed out"})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    # Root cause stays in the logs, never in the response.
    logger.error(
        "transaction_store_error",
        extra={
            "path": request.url.path,
            "error": str(exc),
            "cause": repr(exc.__cause__),
        },
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Failed to fetch transactions"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
            "type": type(exc).__name__,
        },
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred. It has been logged."},
    )

# ── Health check ───────────────────────────────────────────────────────────────
@app.get("/health", tags=["health"])
def health():
    """Used by load balancer / Cloud Run health checks."""
    return {"status": "ok"}


logger.info("ewallet_api_started", extra={"cors_origins": CORS_ORIGINS})
