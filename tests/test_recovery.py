"""Tests for error recovery."""

import pytest
from aiohttp import web
from aiohttp.test_utils import make_mocked_request
from invariant.config import SiteConfig
from invariant.errors import ContentError, InvalidPath, RenderError, ResourceNotFound
from invariant.recovery import Mend, create_content_mend, error_kinds
from invariant.views import PageTemplates


class FakeError(Exception):
    pass


class FirstError(FakeError):
    pass


class SecondError(FakeError):
    pass


class NestedError(SecondError):
    pass


def respond(text: str):
    def fallback(error: FakeError, request: web.Request) -> web.Response:
        return web.Response(text=text)

    return fallback


SAMPLE_ERRORS: dict[type[ContentError], ContentError] = {
    ResourceNotFound: ResourceNotFound("posts/missing.md"),
    InvalidPath: InvalidPath(".hidden", "it starts with '.'"),
    RenderError: RenderError("front matter has no date"),
}


class TestErrorKinds:
    """Tests for error_kinds()."""

    def test__hierarchy__lists_all_subclasses(self) -> None:
        assert error_kinds(FakeError) == [FirstError, SecondError, NestedError]

    def test__content_errors__match_sample_errors(self) -> None:
        """Every content error kind has a sample exercised below."""
        assert set(error_kinds(ContentError)) == set(SAMPLE_ERRORS)


class TestMendConstruction:
    """Tests for Mend coverage checks."""

    def test__all_kinds_covered__builds(self) -> None:
        mend = Mend(FakeError, {FirstError: respond("first"), SecondError: respond("second")})

        assert mend.base is FakeError

    def test__missing_kind__raises_type_error(self) -> None:
        with pytest.raises(TypeError, match="No fallback for FakeError kinds: SecondError"):
            Mend(FakeError, {FirstError: respond("first")})

    def test__only_subclass_covered__parent_is_missing(self) -> None:
        with pytest.raises(TypeError, match="SecondError"):
            Mend(FakeError, {FirstError: respond("first"), NestedError: respond("nested")})

    def test__catch_all__raises_type_error(self) -> None:
        with pytest.raises(TypeError, match="catch-all"):
            Mend(FakeError, {FakeError: respond("any")})

    def test__kind_outside_hierarchy__raises_type_error(self) -> None:
        fallbacks = {
            FirstError: respond("first"),
            SecondError: respond("second"),
            ValueError: respond("value"),
        }

        with pytest.raises(TypeError, match="outside FakeError: ValueError"):
            Mend(FakeError, fallbacks)


class TestMendRecover:
    """Tests for Mend.recover()."""

    def test__subclass__uses_ancestor_fallback(self) -> None:
        mend = Mend(FakeError, {FirstError: respond("first"), SecondError: respond("second")})
        request = make_mocked_request("GET", "/")

        response = mend.recover(NestedError(), request)

        assert response.text == "second"

    def test__foreign_error__raises_type_error(self) -> None:
        mend = Mend(FakeError, {FirstError: respond("first"), SecondError: respond("second")})
        request = make_mocked_request("GET", "/")

        with pytest.raises(TypeError, match="is not a FakeError kind"):
            mend.recover(KeyError("x"), request)


class TestContentMend:
    """Tests for create_content_mend()."""

    @pytest.fixture
    def mend(self) -> Mend[ContentError]:
        return create_content_mend(PageTemplates(SiteConfig()))

    def test__every_kind__renders_distinct_page(self, mend: Mend[ContentError]) -> None:
        request = make_mocked_request("GET", "/missing")

        bodies = {kind: mend.recover(error, request).text for kind, error in SAMPLE_ERRORS.items()}

        assert len(set(bodies.values())) == len(SAMPLE_ERRORS)

    def test__every_kind__answers_200_html(self, mend: Mend[ContentError]) -> None:
        request = make_mocked_request("GET", "/missing")

        for error in SAMPLE_ERRORS.values():
            response = mend.recover(error, request)

            assert response.status == 200
            assert response.content_type == "text/html"

    def test__render_error__shows_bad_markdown(self, mend: Mend[ContentError]) -> None:
        request = make_mocked_request("GET", "/guide")

        response = mend.recover(RenderError("front matter has no date"), request)

        assert "Bad markdown: front matter has no date" in response.text

    def test__resource_not_found__shows_path_and_url(self, mend: Mend[ContentError]) -> None:
        request = make_mocked_request("GET", "/missing")

        response = mend.recover(ResourceNotFound("posts/missing.md"), request)

        assert "Path posts/missing.md not found" in response.text
        assert "<code>/missing</code>" in response.text

    def test__invalid_path__shows_reason(self, mend: Mend[ContentError]) -> None:
        request = make_mocked_request("GET", "/images/.hidden")

        response = mend.recover(InvalidPath(".hidden", "it is hidden"), request)

        assert ".hidden is not valid: it is hidden" in response.text
