import logging
from typing import Any

from fastapi import FastAPI

from action_redirect import __version__
from action_redirect.api.deps import get_settings
from action_redirect.api.routing import ControllerRegistry, router
from action_redirect.rules.loader import load_rules
from action_redirect.rules.models import Rules

logger = logging.getLogger(__name__)


def configure_logging(rules: Rules) -> None:
    """Configure root logging from the rules file."""
    logging.basicConfig(
        level=getattr(logging, rules.logging.level.upper(), logging.INFO),
        format=rules.logging.format,
    )


def create_app(
    rules: Rules | None = None,
    registry: ControllerRegistry | None = None,
) -> FastAPI:
    """
    Build the application.

    Rules are loaded from the configured rules path when not given; a missing
    or invalid file fails fast.
    """
    if rules is None:
        settings = get_settings()
        rules = load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)

    configure_logging(rules)

    app = FastAPI(title="Action Redirect", version=__version__)
    app.state.rules = rules
    app.state.controllers = registry or ControllerRegistry()

    app.include_router(router, tags=["Controllers"])

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        return {
            "status": "ok",
            "version": __version__,
            "controllers": app.state.controllers.names(),
        }

    return app
