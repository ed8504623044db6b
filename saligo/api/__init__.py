from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from saligo.ai.orchestrator import AIOrchestrator
from saligo.api.auth import get_credentials_verifier
from saligo.api.endpoints import get_endpoints_router
from saligo.config import Settings
from saligo.errors import ErrorCode, SaligoError

STATUS_BY_CODE = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INSUFFICIENT_SEEDS: 422,
    ErrorCode.MOC_TOO_SMALL: 422,
    ErrorCode.MOC_TOO_LARGE: 422,
    ErrorCode.MOC_NO_VALID_NOTES: 422,
    ErrorCode.INVALID_MOC: 422,
    ErrorCode.RATE_LIMIT_EXCEEDED: 429,
    ErrorCode.INVALID_API_KEY: 401,
    ErrorCode.QUOTA_EXCEEDED: 502,
    ErrorCode.PROVIDER_ERROR: 502,
    ErrorCode.INVALID_RESPONSE: 502,
    ErrorCode.NETWORK_ERROR: 503,
    ErrorCode.TIMEOUT: 504,
}


async def handle_saligo_error(request: Request, exc: SaligoError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, 500)
    if status_code >= 500:
        logger.error(f"{request.url.path} failed with {exc.code.value}: {exc.message}")
    else:
        logger.info(f"{request.url.path} rejected with {exc.code.value}: {exc.message}")

    headers = {}
    if exc.retry_after is not None:
        headers["Retry-After"] = str(max(1, round(exc.retry_after)))
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


def create_app(*, settings: Settings, orchestrator: AIOrchestrator) -> FastAPI:
    """Create FastAPI app."""

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        orchestrator.dispose()

    app = FastAPI(title="Saligo", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SaligoError, handle_saligo_error)

    app.include_router(
        router=get_endpoints_router(
            orchestrator=orchestrator, verify=get_credentials_verifier(settings)
        )
    )

    return app
