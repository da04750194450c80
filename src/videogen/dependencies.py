"""Dependency wiring helpers."""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import AppConfig
from .generation.generation_api import router as generation_router
from .generation.generation_service import GenerationService


def include_routers(
    app: FastAPI,
    config: AppConfig,
    *,
    generation_service: GenerationService | None = None,
) -> None:
    """Mount module routers and attach services."""
    service = generation_service or GenerationService(config=config)

    app.state.config = config
    app.state.generation_service = service

    app.include_router(generation_router)

    # Must stay after the API routers.
    if config.frontend_root.exists():
        app.mount(
            "/",
            StaticFiles(directory=config.frontend_root, html=True),
            name="frontend",
        )
