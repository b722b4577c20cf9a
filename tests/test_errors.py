"""Tests for zenhance.errors and zenhance.server.errors."""

import logging

from zenhance.errors import (
    ActionNotFound,
    ControllerNotFound,
    HTTPError,
    NotFound,
    PartialRenderError,
    TemplateNotFound,
)
from zenhance.server.errors import error_page, publish_error, status_for


class TestHierarchy:
    def test_not_found_family(self) -> None:
        for cls in (ControllerNotFound, ActionNotFound, TemplateNotFound):
            exc = cls("missing")
            assert isinstance(exc, NotFound)
            assert isinstance(exc, HTTPError)
            assert exc.status == 404
            assert exc.detail == "missing"

    def test_str(self) -> None:
        assert str(NotFound()) == "404: Not Found"
        assert str(HTTPError(status=503)) == "503"

    def test_partial_error_html_is_escaped(self) -> None:
        markup = PartialRenderError("<bad>").__html__()
        assert "&lt;bad&gt;" in markup
        assert markup.startswith('<span class="zenhance-partial-error">')


class TestPublishError:
    def test_status_for(self) -> None:
        assert status_for(ActionNotFound("x")) == 404
        assert status_for(ValueError("x")) == 500

    def test_error_page_escapes(self) -> None:
        try:
            raise ValueError("<script>")
        except ValueError as exc:
            page = error_page(exc)
        assert page.startswith("<h1>Zenhance Error</h1>")
        assert "&lt;script&gt;" in page
        assert "<script>" not in page

    def test_internal_error_is_logged_with_traceback(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="zenhance.server"):
            response = publish_error(RuntimeError("boom"))
        assert response.status == 500
        assert "boom" in response.text
        assert caplog.records[0].exc_info is not None

    def test_reporting_disabled(self) -> None:
        response = publish_error(RuntimeError("secret"), error_reporting=False)
        assert response.status == 500
        assert response.text == "Internal Server Error"

    def test_unknown_status_without_reporting(self) -> None:
        response = publish_error(HTTPError(status=599), error_reporting=False)
        assert response.text == "599"
