"""
Unit Tests for Content Resolution
=================================

Tests for template lookup, URL detection and fetching, and content resolution order.
"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import jinja2
import pytest

from htmlshot.core.rendering.content import (
    ContentResolutionError,
    TemplateRenderer,
    fetch_url,
    is_url,
    resolve_content,
    resolve_static_content,
)

from tests.utils.mocks import FakeFetcher


class TestContentResolutionError:
    def test_error_creation(self):
        error = ContentResolutionError("Test error message")
        assert str(error) == "Test error message"
        assert isinstance(error, Exception)


class TestTemplateRenderer:
    """Test Jinja2 template lookup and rendering."""

    def test_exists_for_file_name(self, templates):
        assert templates.exists("greeting.html")

    def test_exists_for_bare_and_dotted_names(self, templates):
        assert templates.exists("greeting")
        assert templates.exists("reports.invoice")
        assert templates.exists("reports/invoice.html")

    def test_missing_template(self, templates):
        assert not templates.exists("reports.missing")

    @pytest.mark.parametrize("value", ["<p>Hi</p>", "hello world", ""])
    def test_markup_and_prose_are_never_templates(self, templates, value):
        assert not templates.exists(value)

    def test_render_named_template_with_data(self, templates):
        assert templates.render("reports.invoice", {"number": 42}) == "<h1>Invoice 42</h1>"

    def test_render_escapes_data(self, templates):
        assert templates.render("greeting", {"name": "<b>"}) == "<p>Hello &lt;b&gt;</p>"

    def test_render_missing_template_raises(self, templates):
        with pytest.raises(ContentResolutionError, match="Template not found"):
            templates.render("nope")

    def test_render_error_is_wrapped(self, templates):
        with pytest.raises(ContentResolutionError, match="Template rendering failed"):
            templates.render("broken", {})


class TestIsUrl:
    @pytest.mark.parametrize(
        "value",
        ["https://example.com", "http://example.com/page?x=1", "https://example.com:8443/a/b"],
    )
    def test_valid_urls(self, value):
        assert is_url(value)

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "<p>https://example.com</p>",
            "example.com",
            "/relative/path",
            "https://example.com and more text",
            "reports.invoice",
        ],
    )
    def test_not_urls(self, value):
        assert not is_url(value)


class TestResolveContent:
    """Test the resolution order: template object, template name, URL, raw."""

    @pytest.mark.asyncio
    async def test_template_object_rendered_without_data(self, templates):
        template = jinja2.Template("<p>{{ greeting | default('static') }}</p>")
        html = await resolve_content(template, {"greeting": "ignored"}, templates=templates)
        assert html == "<p>static</p>"

    @pytest.mark.asyncio
    async def test_template_name_rendered_with_data(self, templates):
        html = await resolve_content("greeting", {"name": "Ana"}, templates=templates)
        assert html == "<p>Hello Ana</p>"

    @pytest.mark.asyncio
    async def test_template_name_without_data(self, templates):
        html = await resolve_content("greeting", templates=templates)
        assert html == "<p>Hello </p>"

    @pytest.mark.asyncio
    async def test_url_is_fetched(self, templates):
        fetcher = FakeFetcher({"https://example.com/page": "<h1>Remote</h1>"})

        html = await resolve_content(
            "https://example.com/page", templates=templates, fetcher=fetcher
        )

        assert html == "<h1>Remote</h1>"
        assert fetcher.requested == ["https://example.com/page"]

    @pytest.mark.asyncio
    async def test_url_fetch_failure_is_fatal(self, templates):
        fetcher = FakeFetcher(error=ContentResolutionError("URL fetch failed"))

        with pytest.raises(ContentResolutionError):
            await resolve_content("https://example.com", templates=templates, fetcher=fetcher)

    @pytest.mark.asyncio
    async def test_raw_html_used_verbatim(self, templates):
        fetcher = FakeFetcher()
        html = await resolve_content("  <p>raw</p>  ", templates=templates, fetcher=fetcher)

        assert html == "  <p>raw</p>  "
        assert fetcher.requested == []

    @pytest.mark.asyncio
    async def test_template_render_failure_is_fatal(self, templates):
        with pytest.raises(ContentResolutionError):
            await resolve_content("broken", templates=templates)


class TestResolveStaticContent:
    def test_template_object(self, templates):
        assert resolve_static_content(jinja2.Template("<i>x</i>"), templates) == "<i>x</i>"

    def test_names_and_urls_are_raw(self, templates):
        assert resolve_static_content("greeting", templates) == "greeting"
        assert resolve_static_content("https://example.com", templates) == "https://example.com"


def _mock_session(response: MagicMock) -> MagicMock:
    """aiohttp.ClientSession mock whose get() yields ``response``."""
    get_context = MagicMock()
    get_context.__aenter__ = AsyncMock(return_value=response)
    get_context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.get = MagicMock(return_value=get_context)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


class TestFetchUrl:
    """Test the aiohttp fetcher."""

    @pytest.mark.asyncio
    async def test_fetch_returns_body(self):
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.text = AsyncMock(return_value="<h1>Remote</h1>")
        session = _mock_session(response)

        with patch("htmlshot.core.rendering.content.aiohttp.ClientSession", return_value=session):
            body = await fetch_url("https://example.com")

        assert body == "<h1>Remote</h1>"
        session.get.assert_called_once_with("https://example.com")

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        response = MagicMock()
        response.raise_for_status = MagicMock(
            side_effect=aiohttp.ClientResponseError(MagicMock(), (), status=404, message="Not Found")
        )
        session = _mock_session(response)

        with patch("htmlshot.core.rendering.content.aiohttp.ClientSession", return_value=session):
            with pytest.raises(ContentResolutionError, match="URL fetch failed"):
                await fetch_url("https://example.com/missing")

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        session = MagicMock()
        session.__aenter__ = AsyncMock(side_effect=asyncio.TimeoutError())
        session.__aexit__ = AsyncMock(return_value=False)

        with patch("htmlshot.core.rendering.content.aiohttp.ClientSession", return_value=session):
            with pytest.raises(ContentResolutionError):
                await fetch_url("https://example.com")


class TestBundledTemplates:
    def test_card_template(self):
        import htmlshot

        bundled = TemplateRenderer(Path(htmlshot.__file__).parent / "templates")
        html = bundled.render("card", {"title": "Quarterly report", "subtitle": "Q3"})

        assert "<h1>Quarterly report</h1>" in html
        assert "<p>Q3</p>" in html
