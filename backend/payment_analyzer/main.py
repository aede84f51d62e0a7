import logging
from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from payment_analyzer.api import api_router
from payment_analyzer.config import get_settings
from payment_analyzer.core.errors import UserFacingError
from payment_analyzer.domain.errors import DomainError
from payment_analyzer.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


def _parse_cors_origins(value: str | None) -> List[str]:
    """
    Parses comma-separated origins:
      PAYMENT_ANALYZER_CORS_ALLOW_ORIGINS="http://localhost:5173,http://127.0.0.1:5173"
    Empty/None -> default list.
    """
    if not value:
        return [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    parts = [p.strip() for p in value.split(",")]
    return [p for p in parts if p]


settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="payment-analyzer")


# ----------------------------
# Healthcheck (for Docker)
# ----------------------------
@app.get("/health", include_in_schema=False)
def health() -> PlainTextResponse:
    return PlainTextResponse("ok")


# ----------------------------
# Errors
# ----------------------------
@app.exception_handler(UserFacingError)
async def user_facing_error_handler(request: Request, exc: UserFacingError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    body = ErrorResponse(**exc.to_dict())
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.info("%s %s -> domain error: %s", request.method, request.url.path, exc)
    body = ErrorResponse(code=type(exc).__name__, message=str(exc), stage="calculation")
    return JSONResponse(status_code=422, content=body.model_dump(exclude_none=True))


# ----------------------------
# CORS
# ----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_cors_origins(settings.cors_allow_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------------------
# API routers
# ----------------------------
# all routers are mounted under /api
app.include_router(api_router, prefix="/api")
