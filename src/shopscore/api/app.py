"""FastAPI application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopscore.api.routers import scoring
from shopscore.config import Settings, get_settings


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the scoring API from settings."""
    if settings is None:
        settings = get_settings()

    application = FastAPI(
        title=f"{settings.app_name} API",
        description=settings.app_description,
        version=settings.app_version,
        docs_url=f"{settings.api_prefix}/docs" if settings.debug else None,
        redoc_url=f"{settings.api_prefix}/redoc" if settings.debug else None,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(scoring.router, prefix=settings.api_prefix)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "environment": settings.environment}

    return application


app = create_app()
