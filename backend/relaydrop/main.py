# relaydrop/main.py

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from relaydrop import __version__
from relaydrop.api import messages, sessions
from relaydrop.api.deps import get_relay_service
from relaydrop.config import settings
from relaydrop.core.errors import RelayError
from relaydrop.core.rate_limit import limiter
from relaydrop.services.relay_service import RelayService
from relaydrop.utils.logger import setup_logger

setup_logger(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="relaydrop",
    version=__version__,
    description="One-shot ephemeral message relay"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter


def error_response(status_code: int, code: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": code, "detail": detail})


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.code)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return error_response(exc.status_code, exc.code, exc.detail)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "invalid_input", "request body must be a JSON object")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return error_response(429, "rate_limited", f"rate limit exceeded: {exc.detail}")


# Register routers
app.include_router(sessions.router, tags=["Sessions"])
app.include_router(messages.router, tags=["Messages"])


@app.get("/health")
def health_check(service: RelayService = Depends(get_relay_service)):
    return {"status": "ok", "exactly_once": service.store.exactly_once}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("relaydrop.main:app", host="0.0.0.0", port=8000)
