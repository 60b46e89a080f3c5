"""
Browser Renderer
================

Playwright-based rendering of complete HTML documents to images or PDF.
Launches a Chromium instance per render job and closes it afterwards.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import io

from playwright.async_api import async_playwright, Browser, Page
from playwright.async_api import Error as PlaywrightError
from PIL import Image  # type: ignore

from htmlshot.config.logging import get_logger
from htmlshot.config.settings import get_settings
from htmlshot.models.schemas import RenderJob

logger = get_logger(__name__)

# Formats Chromium can capture directly
NATIVE_SCREENSHOT_TYPES = {"png": "png", "jpeg": "jpeg", "jpg": "jpeg"}

# Formats produced by re-encoding a PNG capture
PILLOW_FORMATS = {"webp": "WEBP", "gif": "GIF", "bmp": "BMP", "tiff": "TIFF", "tif": "TIFF"}

SANDBOX_DISABLED_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class RenderError(Exception):
    """Exception raised when rendering fails."""

    pass


class BaseRenderer(ABC):
    """Abstract base class for renderers."""

    @abstractmethod
    async def render(self, job: RenderJob) -> bytes:
        """Render the job's HTML and return the artifact bytes."""
        pass


class PlaywrightRenderer(BaseRenderer):
    """Playwright Chromium renderer implementation."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(renderer="playwright")  # structlog.BoundLoggerBase

    async def render(self, job: RenderJob) -> bytes:
        """
        Render HTML to image or PDF bytes.

        Args:
            job: Render job with HTML, viewport, scale and format

        Returns:
            Rendered artifact bytes

        Raises:
            RenderError: If the browser or image conversion fails
        """
        supported = job.output_format in NATIVE_SCREENSHOT_TYPES or job.output_format in PILLOW_FORMATS
        if not job.is_pdf and not supported:
            raise RenderError(f"Unsupported output format: {job.output_format}")

        try:
            self.logger.info(
                "Rendering HTML",
                html_length=len(job.html),
                width=job.width,
                height=job.height,
                scale_factor=job.scale_factor,
                output_format=job.output_format,
                no_sandbox=job.no_sandbox,
            )

            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(**self._launch_options(job))
                try:
                    page = await self._new_page(browser, job)
                    await page.set_content(job.html, wait_until="networkidle")

                    if job.is_pdf:
                        result = await self._pdf(page, job)
                    else:
                        result = await self._screenshot(page, job)
                finally:
                    await browser.close()

        except PlaywrightError as e:
            error_msg = f"Render failed: {e}"
            self.logger.error("Render error", error=error_msg)
            raise RenderError(error_msg) from e

        self.logger.info(
            "Render completed", output_format=job.output_format, file_size=len(result)
        )
        return result

    def _launch_options(self, job: RenderJob) -> Dict[str, Any]:
        """Browser launch options for the job."""
        args: List[str] = ["--disable-dev-shm-usage"]
        if job.no_sandbox:
            args.extend(SANDBOX_DISABLED_ARGS)

        options: Dict[str, Any] = {
            "headless": self.settings.playwright_headless,
            "chromium_sandbox": not job.no_sandbox,
            "args": args,
        }
        if job.chrome_path:
            options["executable_path"] = job.chrome_path
        return options

    async def _new_page(self, browser: Browser, job: RenderJob) -> Page:
        """Create a page with the job's viewport and scale factor."""
        context = await browser.new_context(
            viewport={"width": job.width, "height": job.height},
            device_scale_factor=job.scale_factor,
        )
        page = await context.new_page()
        page.set_default_timeout(self.settings.playwright_timeout)
        return page

    async def _pdf(self, page: Page, job: RenderJob) -> bytes:
        return await page.pdf(
            width=f"{job.width}px",
            height=f"{job.height}px",
            print_background=True,
        )

    async def _screenshot(self, page: Page, job: RenderJob) -> bytes:
        screenshot_type = NATIVE_SCREENSHOT_TYPES.get(job.output_format, "png")
        screenshot_bytes = await page.screenshot(type=screenshot_type, full_page=False)

        if job.output_format in NATIVE_SCREENSHOT_TYPES:
            return screenshot_bytes
        return convert_image(screenshot_bytes, job.output_format)


def convert_image(png_bytes: bytes, output_format: str) -> bytes:
    """
    Re-encode a PNG capture with Pillow.

    Args:
        png_bytes: PNG bytes captured by the browser
        output_format: Target format name (webp, gif, bmp, tiff)

    Returns:
        Image bytes in the target format

    Raises:
        RenderError: If the format is unknown or the image cannot be encoded
    """
    pil_format: Optional[str] = PILLOW_FORMATS.get(output_format)
    if pil_format is None:
        raise RenderError(f"Unsupported output format: {output_format}")

    try:
        image = Image.open(io.BytesIO(png_bytes))  # type: ignore[attr-defined]

        # saved as 24-bit BMP
        if pil_format == "BMP" and image.mode == "RGBA":  # type: ignore[attr-defined]
            image = image.convert("RGB")  # type: ignore[attr-defined]

        output = io.BytesIO()
        image.save(output, format=pil_format)  # type: ignore[attr-defined]
    except (OSError, ValueError) as e:
        raise RenderError(f"Image conversion to {output_format} failed: {e}") from e

    converted = output.getvalue()
    logger.debug(
        "Image converted",
        output_format=output_format,
        original_size=len(png_bytes),
        converted_size=len(converted),
    )
    return converted


# Global renderer instance
_renderer: Optional[BaseRenderer] = None


def get_renderer() -> BaseRenderer:
    """Get the process-wide renderer."""
    global _renderer
    if _renderer is None:
        _renderer = PlaywrightRenderer()
    return _renderer


def set_renderer(renderer: Optional[BaseRenderer]) -> None:
    """Replace the process-wide renderer; None restores the Playwright default."""
    global _renderer
    _renderer = renderer
