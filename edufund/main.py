# main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edufund.api.routes.health import router as health_router
from edufund.config import Settings, get_settings
from edufund.errors import register_error_handlers
from edufund.registry import build_registry, prepare_schema
from edufund.routers.onboarding import router as onboarding_router
from edufund.routers.proposals import router as proposals_router


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Built once per process; handlers read it through dependencies.
        registry = build_registry(settings)
        prepare_schema(registry)
        app.state.registry = registry
        try:
            yield
        finally:
            registry.connections.dispose()

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(application)

    # Health endpoints (do not depend on API_PREFIX)
    application.include_router(health_router)

    application.include_router(onboarding_router, prefix=settings.api_prefix)
    application.include_router(proposals_router, prefix=settings.api_prefix)
    return application


app = create_app()
