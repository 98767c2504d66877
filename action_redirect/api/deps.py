import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, Request

from action_redirect.adapters.listeners import LoggingRedirectListener
from action_redirect.adapters.url_mappings import ConventionalUrlMappings
from action_redirect.components.redirect import (
    RedirectConfig,
    RedirectListenerPort,
    RedirectService,
)
from action_redirect.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(
            os.environ.get("REDIRECT_RULES_PATH", self.base_dir / "redirect_rules.yaml")
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
def get_rules(request: Request) -> Rules:
    rules: Rules = request.app.state.rules
    return rules


# --- Adapters ---
def get_url_mappings(rules: Rules = Depends(get_rules)) -> ConventionalUrlMappings:
    return ConventionalUrlMappings(
        controllers=rules.url_mappings.controllers,
        default_action=rules.url_mappings.default_action,
    )


def get_redirect_listeners(
    rules: Rules = Depends(get_rules),
) -> tuple[RedirectListenerPort, ...]:
    if rules.logging.log_redirects:
        return (LoggingRedirectListener(),)
    return ()


# --- Services ---
def get_redirect_service(
    rules: Rules = Depends(get_rules),
    url_mappings: ConventionalUrlMappings = Depends(get_url_mappings),
    listeners: tuple[RedirectListenerPort, ...] = Depends(get_redirect_listeners),
) -> RedirectService:
    return RedirectService(
        url_mappings=url_mappings,
        listeners=listeners,
        config=RedirectConfig(
            enable_jsessionid=rules.enable_jsessionid(),
            status_code=rules.get_status_code(),
        ),
    )
