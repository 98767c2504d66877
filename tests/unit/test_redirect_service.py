"""
Tests for RedirectService.

Covers target priority, reverse mapping lookups, the single-redirect guard,
session id encoding and listener notification.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from action_redirect.components.redirect import (
    ByControllerAction,
    ByURI,
    ByURL,
    CannotRedirectError,
    InvalidInvocationError,
    NoMappingFoundError,
    RedirectConfig,
    RedirectIOError,
    RedirectService,
    RedirectState,
    create_redirect_service,
    parse_redirect_arguments,
)
from action_redirect.domain.errors import Errors

# --- Fakes ---


class FakeRequestContext:
    """In-memory request context."""

    def __init__(
        self,
        *,
        controller_name: str | None = "home",
        application_uri: str = "/app",
        character_encoding: str = "utf-8",
        committed: bool = False,
        send_error: Exception | None = None,
    ) -> None:
        self.redirect_state = RedirectState()
        self.controller_name = controller_name
        self.application_uri = application_uri
        self.character_encoding = character_encoding
        self.committed = committed
        self.send_error = send_error
        self.sent: list[tuple[str, int]] = []

    def is_committed(self) -> bool:
        return self.committed

    def encode_redirect_url(self, url: str) -> str:
        return f"{url};jsessionid=abc123"

    def send_redirect(self, url: str, status_code: int = 302) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((url, status_code))


class RecordingUrlCreator:
    """Builds /controller/action[/id][#fragment] and records calls."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def create_url(
        self,
        controller_name: str | None,
        action_name: str | None,
        params: Mapping[str, Any],
        encoding: str,
        fragment: str | None = None,
    ) -> str:
        self.calls.append(
            {
                "controller": controller_name,
                "action": action_name,
                "params": dict(params),
                "encoding": encoding,
                "fragment": fragment,
            }
        )
        url = f"/{controller_name}/{action_name}"
        if "id" in params:
            url += f"/{params['id']}"
        if fragment:
            url += f"#{fragment}"
        return url


class RecordingUrlMappings:
    """Reverse mappings that record every lookup."""

    def __init__(self, match: bool = True) -> None:
        self.match = match
        self.creator = RecordingUrlCreator()
        self.lookups: list[tuple[str | None, str | None, dict[str, Any]]] = []

    def get_reverse_mapping(
        self,
        controller_name: str | None,
        action_name: str | None,
        params: Mapping[str, Any],
    ) -> RecordingUrlCreator | None:
        self.lookups.append((controller_name, action_name, dict(params)))
        return self.creator if self.match else None


class RecordingListener:
    def __init__(self, name: str, log: list[tuple[str, str]]) -> None:
        self.name = name
        self.log = log

    def response_redirected(self, url: str) -> None:
        self.log.append((self.name, url))


class FailingListener:
    def response_redirected(self, url: str) -> None:
        raise ValueError("listener failed")


class OrdersController:
    """Minimal controller."""

    controller_name = "orders"

    def __init__(self) -> None:
        self.errors: Errors | None = None

    def view(self) -> None:
        pass

    def list(self) -> None:
        pass


# --- Fixtures ---


@pytest.fixture
def mappings() -> RecordingUrlMappings:
    return RecordingUrlMappings()


@pytest.fixture
def context() -> FakeRequestContext:
    return FakeRequestContext()


@pytest.fixture
def controller() -> OrdersController:
    return OrdersController()


@pytest.fixture
def service(mappings: RecordingUrlMappings) -> RedirectService:
    return RedirectService(url_mappings=mappings)


# --- Target Priority ---


class TestTargetPriority:
    """uri > url > controller/action."""

    def test_uri_is_appended_to_application_uri(
        self, service: RedirectService, context: FakeRequestContext
    ) -> None:
        url = service.redirect(ByURI(uri="/orders/list"), None, context)
        assert url == "/app/orders/list"
        assert context.sent == [("/app/orders/list", 302)]

    def test_uri_wins_over_everything_else(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        mappings: RecordingUrlMappings,
    ) -> None:
        target = parse_redirect_arguments(
            {
                "uri": "/help",
                "url": "https://example.com/",
                "controller": "orders",
                "action": "view",
                "id": 1,
            }
        )
        assert service.redirect(target, None, context) == "/app/help"
        assert mappings.lookups == []

    def test_uri_is_not_normalized(self, service: RedirectService) -> None:
        ctx = FakeRequestContext(application_uri="/app/")
        assert service.redirect(ByURI(uri="/x//y"), None, ctx) == "/app//x//y"

    def test_url_used_verbatim(
        self, service: RedirectService, context: FakeRequestContext
    ) -> None:
        url = "https://example.com/a b?q=1#top"
        assert service.redirect(ByURL(url=url), None, context) == url

    def test_url_wins_over_controller(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        mappings: RecordingUrlMappings,
    ) -> None:
        target = parse_redirect_arguments(
            {"url": "https://example.com/", "controller": "orders", "action": "view"}
        )
        assert service.redirect(target, None, context) == "https://example.com/"
        assert mappings.lookups == []


# --- Reverse Mapping ---


class TestReverseMapping:
    """Controller/action resolution through the URL mapper."""

    def test_id_is_passed_to_mapper(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        mappings: RecordingUrlMappings,
    ) -> None:
        target = ByControllerAction(controller="orders", action="view", id=42)

        url = service.redirect(target, None, context)

        assert url == "/orders/view/42"
        assert mappings.lookups == [("orders", "view", {"id": 42})]
        assert mappings.creator.calls[0]["params"] == {"id": 42}

    def test_caller_params_untouched_after_success(
        self, service: RedirectService, context: FakeRequestContext
    ) -> None:
        params = {"sort": "date"}
        target = ByControllerAction(controller="orders", action="view", id=42, params=params)

        service.redirect(target, None, context)

        assert params == {"sort": "date"}

    def test_caller_params_untouched_after_failure(self, context: FakeRequestContext) -> None:
        mappings = RecordingUrlMappings(match=False)
        service = RedirectService(url_mappings=mappings)
        params = {"sort": "date"}
        target = ByControllerAction(controller="orders", action="view", id=42, params=params)

        with pytest.raises(NoMappingFoundError):
            service.redirect(target, None, context)

        assert mappings.lookups == [("orders", "view", {"sort": "date", "id": 42})]
        assert "id" not in params

    def test_no_mapping_raises_with_details(self, context: FakeRequestContext) -> None:
        service = RedirectService(url_mappings=RecordingUrlMappings(match=False))

        with pytest.raises(NoMappingFoundError) as exc_info:
            service.redirect(ByControllerAction(controller="nope", action="x"), None, context)

        assert exc_info.value.controller_name == "nope"
        assert exc_info.value.action_name == "x"
        assert context.sent == []
        assert context.redirect_state.issued is False

    def test_controller_defaults_to_issuing_controller(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        controller: OrdersController,
        mappings: RecordingUrlMappings,
    ) -> None:
        service.redirect(ByControllerAction(action="list"), controller, context)
        assert mappings.lookups[0][0] == "orders"

    def test_controller_defaults_to_request_controller(
        self, service: RedirectService, mappings: RecordingUrlMappings
    ) -> None:
        ctx = FakeRequestContext(controller_name="books")
        service.redirect(ByControllerAction(action="list"), None, ctx)
        assert mappings.lookups[0][0] == "books"

    def test_explicit_controller_wins(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        controller: OrdersController,
        mappings: RecordingUrlMappings,
    ) -> None:
        service.redirect(ByControllerAction(controller="books", action="list"), controller, context)
        assert mappings.lookups[0][0] == "books"

    def test_action_reference_resolves_to_name(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        controller: OrdersController,
        mappings: RecordingUrlMappings,
    ) -> None:
        service.redirect(ByControllerAction(action=controller.view), controller, context)
        assert mappings.lookups[0][1] == "view"

    def test_missing_action_passed_as_none(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        mappings: RecordingUrlMappings,
    ) -> None:
        service.redirect(ByControllerAction(controller="orders"), None, context)
        assert mappings.lookups[0][1] is None

    def test_fragment_and_encoding_passed_to_creator(
        self, service: RedirectService, mappings: RecordingUrlMappings
    ) -> None:
        ctx = FakeRequestContext(character_encoding="iso-8859-1")
        target = ByControllerAction(controller="orders", action="view", fragment="items")

        url = service.redirect(target, None, ctx)

        assert url == "/orders/view#items"
        assert mappings.creator.calls[0]["encoding"] == "iso-8859-1"
        assert mappings.creator.calls[0]["fragment"] == "items"


# --- Errors Merge ---


class TestErrorsMerge:
    """redirect(errors=...) merges into the controller errors."""

    def test_errors_assigned_when_controller_has_none(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        controller: OrdersController,
    ) -> None:
        errors = Errors("order")
        errors.reject_value("quantity", "min", "Too small", 0)

        service.redirect(ByURI(uri="/x", errors=errors), controller, context)

        assert controller.errors is errors

    def test_errors_appended_to_existing(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        controller: OrdersController,
    ) -> None:
        existing = Errors("order")
        existing.reject("invalid", "Invalid order")
        controller.errors = existing
        incoming = Errors("order")
        incoming.reject_value("quantity", "min", "Too small", 0)

        service.redirect(ByURI(uri="/x", errors=incoming), controller, context)

        assert controller.errors is existing
        assert [e.code for e in existing] == ["invalid", "min"]

    def test_no_errors_leaves_controller_alone(
        self,
        service: RedirectService,
        context: FakeRequestContext,
        controller: OrdersController,
    ) -> None:
        service.redirect(ByURI(uri="/x"), controller, context)
        assert controller.errors is None


# --- Guard ---


class TestRedirectGuard:
    """At most one redirect per request; none after commit."""

    def test_second_redirect_rejected(
        self, service: RedirectService, context: FakeRequestContext
    ) -> None:
        service.redirect(ByURI(uri="/first"), None, context)

        with pytest.raises(CannotRedirectError):
            service.redirect(ByURI(uri="/second"), None, context)

        assert context.sent == [("/app/first", 302)]
        assert context.redirect_state.issued is True

    def test_committed_response_rejected_before_lookup(
        self, service: RedirectService, mappings: RecordingUrlMappings
    ) -> None:
        ctx = FakeRequestContext(committed=True)

        with pytest.raises(CannotRedirectError):
            service.redirect(ByControllerAction(controller="orders", action="view"), None, ctx)

        assert ctx.sent == []
        assert mappings.lookups == []

    def test_missing_target_is_invalid_invocation(
        self, service: RedirectService, context: FakeRequestContext
    ) -> None:
        with pytest.raises(InvalidInvocationError):
            service.redirect(None, None, context)

    def test_invalid_invocation_is_type_error(self) -> None:
        with pytest.raises(TypeError):
            parse_redirect_arguments({})


# --- Dispatch ---


class TestDispatch:
    """Session encoding, status code, listeners and I/O failures."""

    def test_session_id_encoded_when_enabled(
        self, mappings: RecordingUrlMappings, context: FakeRequestContext
    ) -> None:
        service = RedirectService(
            url_mappings=mappings, config=RedirectConfig(enable_jsessionid=True)
        )
        url = service.redirect(ByURI(uri="/x"), None, context)
        assert url == "/app/x;jsessionid=abc123"
        assert context.sent == [("/app/x;jsessionid=abc123", 302)]

    def test_session_id_not_encoded_when_disabled(
        self, service: RedirectService, context: FakeRequestContext
    ) -> None:
        assert service.redirect(ByURI(uri="/x"), None, context) == "/app/x"

    def test_configured_status_code_used(
        self, mappings: RecordingUrlMappings, context: FakeRequestContext
    ) -> None:
        service = RedirectService(url_mappings=mappings, config=RedirectConfig(status_code=303))
        service.redirect(ByURI(uri="/x"), None, context)
        assert context.sent == [("/app/x", 303)]

    def test_listeners_notified_in_order_with_final_url(
        self, mappings: RecordingUrlMappings, context: FakeRequestContext
    ) -> None:
        log: list[tuple[str, str]] = []
        service = create_redirect_service(
            mappings,
            listeners=[RecordingListener("a", log), RecordingListener("b", log)],
            config=RedirectConfig(enable_jsessionid=True),
        )

        service.redirect(ByURI(uri="/x"), None, context)

        assert log == [
            ("a", "/app/x;jsessionid=abc123"),
            ("b", "/app/x;jsessionid=abc123"),
        ]

    def test_io_failure_wrapped_and_guard_unset(self, mappings: RecordingUrlMappings) -> None:
        log: list[tuple[str, str]] = []
        service = RedirectService(url_mappings=mappings, listeners=[RecordingListener("a", log)])
        cause = OSError("connection reset")
        ctx = FakeRequestContext(send_error=cause)

        with pytest.raises(RedirectIOError) as exc_info:
            service.redirect(ByURI(uri="/x"), None, ctx)

        assert exc_info.value.__cause__ is cause
        assert isinstance(exc_info.value, CannotRedirectError)
        assert ctx.redirect_state.issued is False
        assert log == []

    def test_listener_failure_propagates(
        self, mappings: RecordingUrlMappings, context: FakeRequestContext
    ) -> None:
        service = RedirectService(url_mappings=mappings, listeners=[FailingListener()])

        with pytest.raises(ValueError, match="listener failed"):
            service.redirect(ByURI(uri="/x"), None, context)

        assert context.sent == [("/app/x", 302)]
        assert context.redirect_state.issued is False

    def test_resolve_does_not_send(
        self, service: RedirectService, context: FakeRequestContext
    ) -> None:
        assert service.resolve(ByURL(url="/elsewhere"), None, context) == "/elsewhere"
        assert context.sent == []
        assert context.redirect_state.issued is False
