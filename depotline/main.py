from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.rest import router as rest_router
from .container import build_container
from .errors import DomainError, ErrorCategory, ErrorDetail
from .logging import ServiceLogger, setup_logging
from .observability import configure_observability
from .settings import Settings, load_settings

STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 422,
    ErrorCategory.BUSINESS_LOGIC: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.AUTHENTICATION: 401,
    ErrorCategory.SYSTEM: 503,
}


def status_for(detail: ErrorDetail) -> int:
    # Retryable business failures are stock races: the request was fine, the state moved.
    if detail.category == ErrorCategory.BUSINESS_LOGIC and detail.retryable:
        return 409
    return STATUS_BY_CATEGORY[detail.category]


def create_app(settings: Settings) -> FastAPI:
    setup_logging(settings.log_level)
    logger = ServiceLogger("api")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        description="Prices and fulfils bulk device orders across distributed warehouses.",
    )

    container = build_container(settings)
    app.state.container = container

    configure_observability(app, settings, engine=container.db.engine if container.db else None)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        if container.db:
            container.db.dispose()

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        status_code = status_for(exc.detail)
        logger.warning(
            "Request failed",
            path=request.url.path,
            status=status_code,
            category=exc.detail.category.value,
            reason=exc.detail.reason,
        )
        return JSONResponse(status_code=status_code, content={"detail": exc.detail.model_dump(mode="json")})

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get(settings.request_id_header, "") or container.id_provider.new_id()
        response = await call_next(request)
        response.headers[settings.request_id_header] = request_id
        return response

    app.include_router(rest_router)
    app.include_router(rest_router, prefix="/v1")

    return app


def app_from_env() -> FastAPI:
    return create_app(load_settings())
