from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import Awaitable, Callable
import logging

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.handlers.analyses import list_history_handler, upload_analysis_handler
from app.api.handlers.deps import ApiDeps
from app.api.schemas import (
    AnalysisResponse,
    ErrorResponse,
    HealthResponse,
    HistoryEntryResponse,
    ReadyResponse,
)
from app.domain.error_taxonomy import client_message_for, http_status_for, resolve_stage_error
from app.domain.errors import DomainError
from app.domain.models import CallerIdentity

SERVICE_NAME = "green-procurement-api"
ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def build_app(
    run_id: str,
    api_deps: ApiDeps | None = None,
    on_startup: Callable[[], Awaitable[None]] | None = None,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    logger = logging.getLogger("runtime")
    bearer = HTTPBearer(auto_error=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        del app
        logger.info(
            "service started",
            extra={"service": SERVICE_NAME, "run_id": run_id},
        )

        if on_startup is not None:
            await on_startup()

        yield

        if on_shutdown is not None:
            await on_shutdown()

        logger.info(
            "service stopped",
            extra={"service": SERVICE_NAME, "run_id": run_id},
        )

    app = FastAPI(title=SERVICE_NAME, version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(api_deps.cors_allow_origins) if api_deps is not None else ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        del request
        code = resolve_stage_error(stage=exc.stage or "", code=exc.code)
        return _error_response(http_status_for(code), client_message_for(stage=exc.stage, code=code))

    async def resolve_caller(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    ) -> CallerIdentity | None:
        # Failed verification is not an error here: the request continues
        # without an identity and the analysis service rejects it.
        if credentials is None or api_deps is None:
            return None
        try:
            identity = await api_deps.identity.verify(credentials.credentials)
        except Exception:
            logger.warning(
                "token verification errored",
                exc_info=True,
                extra={"service": SERVICE_NAME, "run_id": run_id, "stage": "authenticate"},
            )
            return None
        if identity is None:
            logger.info(
                "token verification failed",
                extra={"service": SERVICE_NAME, "run_id": run_id, "stage": "authenticate"},
            )
        return identity

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Identity is checked first so malformed anonymous requests still get 401.
        caller = await resolve_caller(await bearer(request))
        if caller is None:
            return _error_response(401, client_message_for(stage="authenticate"))
        logger.info(
            "request validation failed",
            extra={
                "service": SERVICE_NAME,
                "run_id": run_id,
                "stage": "validate",
                "error_code": "bad_request",
            },
        )
        return _error_response(400, client_message_for(stage="validate"))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        del request
        return _error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service=SERVICE_NAME, mode=_mode(api_deps))

    @app.get("/ready", response_model=ReadyResponse, tags=["System"])
    async def ready() -> ReadyResponse:
        return ReadyResponse(
            status="ready" if api_deps is not None else "degraded",
            service=SERVICE_NAME,
            mode=_mode(api_deps),
            repository=type(api_deps.repository).__name__ if api_deps is not None else "none",
            llm=type(api_deps.llm).__name__ if api_deps is not None else "none",
            identity=type(api_deps.identity).__name__ if api_deps is not None else "none",
        )

    @app.post(
        "/api/upload",
        response_model=AnalysisResponse,
        responses=ERROR_RESPONSES,
        tags=["Analyses"],
    )
    async def upload_analysis(
        file: UploadFile | None = File(default=None),
        caller: CallerIdentity | None = Depends(resolve_caller),
    ) -> AnalysisResponse:
        if api_deps is None:
            raise HTTPException(status_code=503, detail="api dependencies are not available")
        payload = await file.read() if file is not None else None
        return await upload_analysis_handler(
            caller=caller,
            filename=file.filename if file is not None else None,
            payload=payload,
            api_deps=api_deps,
        )

    @app.get(
        "/api/history",
        response_model=list[HistoryEntryResponse],
        responses=ERROR_RESPONSES,
        tags=["Analyses"],
    )
    async def list_history(
        caller: CallerIdentity | None = Depends(resolve_caller),
    ) -> list[HistoryEntryResponse]:
        if api_deps is None:
            raise HTTPException(status_code=503, detail="api dependencies are not available")
        return await list_history_handler(caller=caller, api_deps=api_deps)

    return app


def _error_response(status_code: int, message: str, *, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


def _mode(api_deps: ApiDeps | None) -> str:
    if api_deps is None:
        return "empty"
    return api_deps.mode
