from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
from .middleware import TraceIdMiddleware
from src.domain.errors import is_retryable
import logging

logger = logging.getLogger(__name__)


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {
        "code": exc.base_error.code,
        "message": exc.base_error.message,
        "retryable": False,
    }
    if exc.base_error.details:
        error_dict["details"] = exc.base_error.details
    logger.warning(f"Client error: {exc.base_error.code} trace={_trace_id(request)}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    retryable = is_retryable(exc.base_error.code)
    error_dict = {
        "code": exc.base_error.code,
        "message": exc.base_error.message if retryable else "Internal server error",
        "retryable": retryable,
    }
    logger.error(f"Server error: {exc.base_error.code} trace={_trace_id(request)}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def init_sentry(ApplicationConfig):
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=ApplicationConfig.DSN_SENTRY,
        integrations=[FastApiIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=0.1,
        environment=ApplicationConfig.SENTRY_ENVIRONMENT,
        send_default_pii=False,
    )


def create_app(ApplicationConfig) -> FastAPI:
    configure_logging(ApplicationConfig.LOG_LEVEL)
    if ApplicationConfig.ENABLE_SENTRY and ApplicationConfig.DSN_SENTRY:
        init_sentry(ApplicationConfig)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if ApplicationConfig.DB_CREATE_TABLES:
            from src.depends import init_db

            await init_db()
        yield

    app = FastAPI(
        title="Interview Invite Verification API", version="0.1.0", lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TraceIdMiddleware, log_requests=ApplicationConfig.ENABLE_LOGGING_MIDDLEWARE
    )

    from src.api.routes import access, admin, health_check, invites

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(invites.router, tags=["Invites"])
    app.include_router(access.router, tags=["Access"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
