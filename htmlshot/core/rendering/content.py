"""
Content Resolution
==================

Turn the value handed to the render builder into an HTML string. The value may
be a Jinja2 template object, the name of a template on disk, an absolute URL,
or raw HTML/text.
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

import aiohttp
import jinja2
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from htmlshot.config.logging import get_logger
from htmlshot.config.settings import get_settings

logger = get_logger(__name__)

Content = Union[jinja2.Template, str]
Fetcher = Callable[[str], Awaitable[str]]

_url_adapter: TypeAdapter[AnyHttpUrl] = TypeAdapter(AnyHttpUrl)


class ContentResolutionError(Exception):
    """Exception raised when builder content cannot be turned into HTML."""

    pass


class TemplateRenderer:
    """Jinja2-backed template lookup and rendering."""

    def __init__(self, template_path: Optional[Path] = None):
        self.settings = get_settings()
        self.template_path = template_path or self.settings.template_path
        self.logger: Any = logger.bind(component="templates")  # structlog.BoundLoggerBase
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self.template_path)),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
        )

    def _candidates(self, name: str) -> List[str]:
        """
        Template names to try for ``name``.

        ``reports/invoice.html`` is used as given; a dotted name such as
        ``reports.invoice`` also maps to ``reports/invoice.html``.
        """
        candidates = [name]
        if not name.endswith(".html"):
            candidates.append(name.replace(".", "/") + ".html")
        return candidates

    def find(self, name: str) -> Optional[jinja2.Template]:
        """Return the template called ``name`` or None when there is none."""
        # raw markup and prose are never template names
        if not name or "<" in name or any(ch.isspace() for ch in name):
            return None

        for candidate in self._candidates(name):
            try:
                return self.env.get_template(candidate)
            except jinja2.TemplateNotFound:
                continue
        return None

    def exists(self, name: str) -> bool:
        return self.find(name) is not None

    def render(self, template: Union[jinja2.Template, str], data: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render a template object or template name.

        Raises:
            ContentResolutionError: If the template is missing or fails to render
        """
        if isinstance(template, str):
            name = template
            found = self.find(name)
            if found is None:
                raise ContentResolutionError(f"Template not found: {name}")
            template = found

        try:
            html = template.render(**dict(data or {}))
        except jinja2.TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            self.logger.error("Template rendering failed", template=template.name, error=error_msg)
            raise ContentResolutionError(error_msg) from e

        self.logger.debug("Template rendered", template=template.name, html_length=len(html))
        return html


def is_url(value: str) -> bool:
    """Return True for a syntactically valid absolute http(s) URL."""
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


async def fetch_url(url: str) -> str:
    """
    Fetch a URL and return the response body as text.

    Raises:
        ContentResolutionError: On connection errors, timeouts or non-2xx responses
    """
    settings = get_settings()
    timeout = aiohttp.ClientTimeout(total=settings.fetch_timeout)

    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                response.raise_for_status()
                body = await response.text()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        error_msg = f"URL fetch failed: {url}: {e}"
        logger.error("URL fetch failed", url=url, error=str(e))
        raise ContentResolutionError(error_msg) from e

    logger.debug("URL fetched", url=url, html_length=len(body))
    return body


async def resolve_content(
    content: Content,
    data: Optional[Dict[str, Any]] = None,
    templates: Optional[TemplateRenderer] = None,
    fetcher: Optional[Fetcher] = None,
) -> str:
    """
    Resolve builder content into HTML.

    Args:
        content: Template object, template name, absolute URL or raw HTML
        data: Data passed to a named template
        templates: Template renderer used for template objects and names
        fetcher: Coroutine function used to fetch URLs

    Returns:
        HTML string

    Raises:
        ContentResolutionError: If template rendering or URL fetching fails
    """
    if isinstance(content, jinja2.Template):
        logger.debug("Resolving content", kind="template_object", template=content.name)
        return (templates or TemplateRenderer()).render(content)

    templates = templates or TemplateRenderer()
    template = templates.find(content)
    if template is not None:
        logger.debug("Resolving content", kind="template_name", template=content)
        return templates.render(template, data)

    if is_url(content):
        logger.debug("Resolving content", kind="url", url=content)
        return await (fetcher or fetch_url)(content)

    logger.debug("Resolving content", kind="raw", html_length=len(content))
    return content


def resolve_static_content(content: Content, templates: Optional[TemplateRenderer] = None) -> str:
    """Resolve a template object or raw string, without name lookup or URL fetch."""
    if isinstance(content, jinja2.Template):
        return (templates or TemplateRenderer()).render(content)
    return content
