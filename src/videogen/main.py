"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import ApiError, api_error_handler, request_validation_error_handler
from .config import AppConfig, load_config
from .dependencies import include_routers
from .generation.generation_service import GenerationService
from .logging import configure_logging


def create_app(
    config: AppConfig | None = None,
    *,
    generation_service: GenerationService | None = None,
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    configure_logging()
    cfg = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.generation_service.aclose()

    app = FastAPI(title="Video Generation Proxy", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    include_routers(app, cfg, generation_service=generation_service)
    return app


app = create_app()
