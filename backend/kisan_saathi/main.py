import datetime as dt
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kisan_saathi import __version__
from kisan_saathi.config import settings
from kisan_saathi.di import cache_sizes
from kisan_saathi.errors import CredentialMissing, KisanError, ValidationRejected
from kisan_saathi.http import init_http, close_http
from kisan_saathi.routers import conditions, location, market

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("kisan_saathi")

# Single FastAPI instance
app = FastAPI(title=settings.APP_NAME, version=__version__)

# Single startup event
@app.on_event("startup")
async def startup_event():
    """Initialize HTTP client on startup."""
    await init_http()
    log.info("HTTP client initialized")

# Single shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Close HTTP client on shutdown."""
    await close_http()
    log.info("HTTP client closed")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={
            "success": False,
            "error": error,
            "message": message,
            "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in e.get("loc", ())) for e in exc.errors())
    return _error(400, "invalid_request", f"Missing or invalid fields: {fields}")


@app.exception_handler(ValidationRejected)
async def validation_rejected(request: Request, exc: ValidationRejected):
    return _error(400, exc.kind, str(exc))


@app.exception_handler(CredentialMissing)
async def credential_missing(request: Request, exc: CredentialMissing):
    log.error("❌ %s", exc)
    return _error(500, exc.kind, str(exc))


@app.exception_handler(KisanError)
async def kisan_error(request: Request, exc: KisanError):
    log.error("❌ Unhandled %s on %s: %s", exc.kind, request.url.path, exc)
    return _error(500, exc.kind, str(exc))


# API endpoints
@app.get("/")
async def root():
    return {"ok": True, "service": settings.APP_NAME, "version": app.version}

@app.get("/health")
async def health():
    return {
        "ok": True,
        "version": app.version,
        "default_crop": settings.DEFAULT_CROP,
        "default_state": settings.DEFAULT_STATE,
        "caches": cache_sizes(),
    }


app.include_router(market.router)
app.include_router(location.router)
app.include_router(conditions.router)
