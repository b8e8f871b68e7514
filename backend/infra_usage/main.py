import logging
import time

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import Response

from infra_usage.api.routes import router as api_router
from infra_usage.core import telemetry
from infra_usage.core.config import Settings, settings
from infra_usage.services.platform import PlatformAPIError

logger = logging.getLogger(__name__)


async def platform_error_handler(request: Request, exc: PlatformAPIError) -> JSONResponse:
    logger.warning("Platform error escaped %s %s: %s", request.method, request.url.path, exc)
    telemetry.capture_exception(exc, {"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Upstream platform API error", "upstream_status": exc.status_code},
    )


def create_app(config: Settings | None = None) -> FastAPI:
    config = config or settings
    telemetry.setup_logging(config)
    telemetry.setup_sentry(config)

    app = FastAPI(title=config.project_name, version=config.version)

    if config.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_allow_origins,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def log_and_trace_requests(request: Request, call_next):  # type: ignore[override]
        start = time.perf_counter()
        telemetry.bind_request_context(request)
        response: Response = await call_next(request)
        duration = (time.perf_counter() - start) * 1000
        response.headers["Server-Timing"] = f"app;dur={duration:.1f}"
        telemetry.log_request(request, response.status_code, duration)
        return response

    app.add_exception_handler(PlatformAPIError, platform_error_handler)  # type: ignore[arg-type]
    app.include_router(api_router)

    return app


app = create_app()
