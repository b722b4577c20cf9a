"""Tests for zenhance.controller — context injection."""

from zenhance.controller import Controller, ControllerContext
from zenhance.http.headers import Headers
from zenhance.http.query import QueryParams
from zenhance.http.request import Request
from zenhance.registry import Registry
from zenhance.routing.convention import resolve_routing


def _context(layout: str | None = "main") -> ControllerContext:
    registry = Registry()
    return ControllerContext(
        request=Request("GET", "/user", Headers(()), QueryParams()),
        routing=resolve_routing("/user"),
        helpers=registry.new_cycle(),
        registry=registry,
        params={"id": "7"},
        layout=layout,
    )


class TestInjection:
    def test_inject_sets_context_and_helpers(self) -> None:
        context = _context()
        controller = Controller()
        context.inject(controller)

        assert controller.view is context.view
        assert controller.params == {"id": "7"}
        assert controller.head_script is context.helpers["head_script"]
        assert controller.head_link is context.helpers["head_link"]
        assert controller.disable_renderer is False

    def test_set_layout_changes_this_cycle_only(self) -> None:
        context = _context()
        controller = Controller()
        context.inject(controller)
        controller.set_layout("other")
        assert context.layout == "other"
        assert _context().layout == "main"

    def test_collect_reads_replaced_view_and_response(self) -> None:
        context = _context()
        controller = Controller()
        context.inject(controller)
        controller.view = {"a": 1}
        controller.response = controller.response.with_status(201)
        context.collect(controller)
        assert context.view == {"a": 1}
        assert context.response.status == 201


class TestControllerBase:
    def test_param_and_redirect(self) -> None:
        controller = Controller()
        _context().inject(controller)
        assert controller.param("id") == "7"
        assert controller.param("missing", "x") == "x"

        response = controller.redirect("/login", 303)
        assert controller.disable_renderer is True
        assert response.status == 303
        assert controller.response is response
