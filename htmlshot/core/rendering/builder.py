"""
Render Request Builder
======================

Fluent configuration for a single render job. The builder holds the resolved
HTML, viewport, scale factor, output format and sandbox flag, normalizes the
HTML into a complete document and dispatches one render call per terminal
operation. Rendered bytes are never cached; every terminal call re-renders.

Example:
    builder = await RenderRequestBuilder.make("reports.invoice", {"invoice": invoice})
    png = await builder.set_proportion(16, 9).set_scale(2).generate()
"""

import base64
import math
import mimetypes
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from fastapi.responses import StreamingResponse

from htmlshot.config.logging import get_logger
from htmlshot.config.settings import Settings, get_settings
from htmlshot.core.rendering.content import (
    Content,
    Fetcher,
    TemplateRenderer,
    resolve_content,
    resolve_static_content,
)
from htmlshot.core.rendering.document import DEFAULT_LANG, locale_to_lang, wrap_html
from htmlshot.core.rendering.renderer import BaseRenderer, get_renderer
from htmlshot.core.storage.manager import StorageManager, get_storage_manager
from htmlshot.models.schemas import RenderJob, Viewport

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"


class RenderRequestBuilder:
    """Mutable, chainable render job configuration and dispatcher."""

    def __init__(
        self,
        content: str,
        *,
        lang: str = DEFAULT_LANG,
        settings: Optional[Settings] = None,
        renderer: Optional[BaseRenderer] = None,
        storage: Optional[StorageManager] = None,
    ):
        self._content = content
        self.lang = lang
        self.settings = settings or get_settings()
        self._renderer = renderer
        self._storage = storage
        self.viewport = Viewport(
            width=self.settings.default_width, height=self.settings.default_height
        )
        self.scale_factor = 1
        self.output_format = self.settings.default_format
        self.sandboxed = True
        self.logger: Any = logger.bind(component="render_builder")  # structlog.BoundLoggerBase

    @classmethod
    async def make(
        cls,
        content: Content,
        data: Optional[Dict[str, Any]] = None,
        *,
        settings: Optional[Settings] = None,
        renderer: Optional[BaseRenderer] = None,
        storage: Optional[StorageManager] = None,
        templates: Optional[TemplateRenderer] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> "RenderRequestBuilder":
        """
        Create a builder from a template object, template name, URL or raw HTML.

        Args:
            content: Jinja2 template, template name, absolute URL or HTML
            data: Data for a named template
            settings: Settings, the process-wide settings when omitted
            renderer: Renderer, the process-wide renderer when omitted
            storage: Storage manager, the process-wide manager when omitted
            templates: Template renderer for template objects and names
            fetcher: Coroutine function used to fetch URL content

        Returns:
            A configured builder

        Raises:
            ContentResolutionError: If template rendering or URL fetching fails
        """
        settings = settings or get_settings()
        html = await resolve_content(content, data, templates=templates, fetcher=fetcher)
        return cls(
            html,
            lang=locale_to_lang(settings.app_locale),
            settings=settings,
            renderer=renderer,
            storage=storage,
        )

    @classmethod
    def from_content(
        cls,
        content: Content,
        *,
        settings: Optional[Settings] = None,
        renderer: Optional[BaseRenderer] = None,
        storage: Optional[StorageManager] = None,
        templates: Optional[TemplateRenderer] = None,
    ) -> "RenderRequestBuilder":
        """
        Create a builder from a template object or raw string.

        Unlike ``make`` this never looks up template names or fetches URLs, and
        the document language is always ``en``.
        """
        html = resolve_static_content(content, templates)
        return cls(html, settings=settings, renderer=renderer, storage=storage)

    @property
    def content(self) -> str:
        return self._content

    @property
    def renderer(self) -> BaseRenderer:
        return self._renderer or get_renderer()

    @property
    def storage(self) -> StorageManager:
        return self._storage or get_storage_manager()

    # Configuration

    def set_viewport(self, width: int, height: int) -> "RenderRequestBuilder":
        self.viewport = Viewport(width=width, height=height)
        return self

    def set_proportion(
        self, width_part: int, height_part: int, base_width: Optional[int] = None
    ) -> "RenderRequestBuilder":
        """
        Size the viewport from an aspect ratio.

        Both sides are ``base_width`` scaled by their ratio term over the
        smaller term, so ``(9, 16, 900)`` gives 900x1600. ``base_width``
        defaults to the current viewport width.
        """
        base = self.viewport.width if base_width is None else base_width
        smallest = min(width_part, height_part)

        width = math.floor(width_part * base / smallest)
        height = math.floor(height_part * base / smallest)

        return self.set_viewport(width, height)

    def set_scale(self, scale: int) -> "RenderRequestBuilder":
        self.scale_factor = scale
        return self

    def set_format(self, output_format: str) -> "RenderRequestBuilder":
        self.output_format = output_format.lower()
        return self

    def set_sandbox(self, enabled: bool = True) -> "RenderRequestBuilder":
        self.sandboxed = enabled
        return self

    def get_window_size(self) -> Tuple[int, int]:
        return self.viewport.as_tuple()

    # Rendering

    def normalize(self) -> str:
        """Return ``content`` wrapped into a complete HTML document."""
        return wrap_html(self._content, self.viewport.width, self.viewport.height, self.lang)

    def build_job(self) -> RenderJob:
        """Snapshot the current configuration as a render job."""
        return RenderJob(
            html=self.normalize(),
            width=self.viewport.width,
            height=self.viewport.height,
            scale_factor=self.scale_factor,
            output_format=self.output_format,
            no_sandbox=not self.sandboxed,
            chrome_path=self.settings.chrome_path,
        )

    async def generate(self) -> bytes:
        """
        Render the document.

        Returns:
            PDF bytes when the format is ``pdf``, image bytes otherwise

        Raises:
            Whatever the renderer raises, unchanged
        """
        job = self.build_job()
        self.logger.info(
            "Dispatching render",
            output_format=job.output_format,
            pdf=job.is_pdf,
            width=job.width,
            height=job.height,
            scale_factor=job.scale_factor,
            sandboxed=self.sandboxed,
        )
        return await self.renderer.render(job)

    # Output

    def download_filename(self, filename: Optional[str] = None) -> str:
        """Filename for a download, with the output format as extension."""
        if not filename:
            timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
            filename = f"{self.settings.download_prefix}-{timestamp}.{self.output_format}"

        if not filename.endswith(self.output_format):
            filename = f"{filename}.{self.output_format}"

        return filename

    async def download(self, filename: Optional[str] = None) -> StreamingResponse:
        """Render and return the artifact as a binary attachment response."""
        filename = self.download_filename(filename)
        content = await self.generate()
        media_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

        self.logger.info("Streaming download", filename=filename, file_size=len(content))

        return StreamingResponse(
            iter([content]),
            media_type=media_type,
            headers={"Content-Disposition": content_disposition(filename)},
        )

    async def save(self, path: str, disk: Optional[str] = None) -> bool:
        """
        Render and write the artifact to a storage disk.

        Returns:
            The storage manager's success flag
        """
        content = await self.generate()
        return await self.storage.put(path, content, disk or self.settings.default_disk)

    async def to_base64(self) -> str:
        return base64.b64encode(await self.generate()).decode("utf-8")


def content_disposition(filename: str) -> str:
    """Attachment header value, RFC 5987 encoded for non-ASCII names."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'
