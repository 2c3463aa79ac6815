"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router as api_router
from app.core.config import settings
from app.core.gate import GateConfig
from app.middleware.jwt_gate import JwtGateMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="API Boilerplate",
    version="0.1.0",
    description="User registration and login with bcrypt password hashing and JWT bearer authentication.",
    docs_url="/swagger",
    openapi_url="/swagger/v1/swagger.json",
    redoc_url=None,
)

if not settings.jwt_key_configured:
    logger.warning("JWT_KEY is not set; every protected request will be answered with 500")

# Added first so CORS (added last) wraps it and answers preflight requests itself.
app.add_middleware(JwtGateMiddleware, config=GateConfig.from_settings(settings))
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors with the same {"error": ...} shape as gate rejections."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body validation failures as 400 rather than FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Request validation failed", "details": jsonable_encoder(exc.errors())},
    )


app.include_router(api_router, prefix=settings.API_PREFIX)
