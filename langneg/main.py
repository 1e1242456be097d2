import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from langneg.config import settings
from langneg.exception_handlers import register_exception_handlers
from langneg.i18n.languages import LanguageList
from langneg.i18n.negotiator import LanguageNegotiator
from langneg.i18n.store import JsonFileSettingsStore
from langneg.middleware.language import LanguageNegotiationMiddleware
from langneg.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from langneg.plugins.hooks import HOOK_LANGUAGE_TYPES_CHANGED
from langneg.plugins.loader import initialize_plugins, shutdown_plugins
from langneg.plugins.registry import plugin_registry
from langneg.routes.i18n import i18n_router

logger = logging.getLogger(__name__)


def build_negotiator() -> LanguageNegotiator:
    """Negotiator wired to the global plugin registry and the JSON config file."""
    return LanguageNegotiator(
        plugins=plugin_registry,
        store=JsonFileSettingsStore(settings.negotiation_config_file),
        language_list=LanguageList.from_langcodes(settings.supported_languages, settings.default_language),
        url_part=settings.url_negotiation_part,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load plugins and normalise stored negotiation settings on startup."""
    negotiator = getattr(app.state, "negotiator", None)
    if negotiator is None:
        await initialize_plugins(plugin_registry)
        negotiator = build_negotiator()
        negotiator.rebuild()
        await plugin_registry.fire_hook(HOOK_LANGUAGE_TYPES_CHANGED, {"types": negotiator.types.all_types()})
        app.state.negotiator = negotiator
    logger.info("Language negotiation ready: %s", ", ".join(negotiator.language_list.codes(include_locked=False)))
    yield
    logger.info("Shutting down the application...")
    await shutdown_plugins(negotiator.plugins)


def create_app(negotiator: LanguageNegotiator | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        negotiator: Pre-built negotiator (tests).  When omitted, the lifespan
                    loads plugins and builds one from settings.
    """
    setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        description="Language negotiation service",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )
    if negotiator is not None:
        app.state.negotiator = negotiator

    register_exception_handlers(app)

    # Starlette runs the last-added middleware first
    app.add_middleware(LanguageNegotiationMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.include_router(i18n_router, prefix="/api/v1/i18n")

    @app.get("/health", tags=["Root"])
    async def health():
        return {"status": "ok"}

    if settings.debug:
        logger.info("Running in %s mode", settings.environment)

    return app
