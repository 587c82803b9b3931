# keyrelay/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from keyrelay import __version__, config
from keyrelay.api import messages, users
from keyrelay.core.errors import RelayError
from keyrelay.core.limiter import limiter, rate_limit_exceeded_handler
from keyrelay.infra.database import init_db
from keyrelay.utils.logger import setup_logger

setup_logger()

logger = logging.getLogger(__name__)

if config.STORE_BACKEND not in config.STORE_BACKENDS:
    raise RuntimeError(
        f"KEYRELAY_STORE must be one of {', '.join(config.STORE_BACKENDS)}, got {config.STORE_BACKEND!r}"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.STORE_BACKEND == "sql":
        init_db()
    logger.info("keyrelay %s ready (store=%s)", __version__, config.STORE_BACKEND)
    yield


app = FastAPI(
    title="Keyrelay",
    version=__version__,
    description="Store-and-forward relay for end-to-end encrypted messages",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unknown routes and wrong methods use the same error shape as the API
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected malformed request to %s", request.url.path)
    return JSONResponse(status_code=400, content={"error": "invalid request body"})


# Register routers
app.include_router(users.router, tags=["Users"])
app.include_router(messages.router, tags=["Messages"])


@app.get("/health")
def health_check():
    return {"status": "ok"}
