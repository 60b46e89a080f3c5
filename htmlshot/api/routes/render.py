"""
Render Routes
=============

FastAPI routes exposing the render builder: attachment download, base64 and
render-to-storage.
"""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from htmlshot.core.rendering.builder import RenderRequestBuilder
from htmlshot.models.schemas import (
    Base64Response,
    RenderRequest,
    SaveRequest,
    SaveResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Rendering"])


async def build_from_request(request: RenderRequest) -> RenderRequestBuilder:
    """
    Create and configure a builder from an API request.

    Explicit width/height are applied first; a proportion is then derived from
    the resulting width.
    """
    builder = await RenderRequestBuilder.make(request.content, request.data)

    width, height = builder.get_window_size()
    builder.set_viewport(
        request.width if request.width is not None else width,
        request.height if request.height is not None else height,
    )

    if request.proportion:
        width_part, height_part = (int(part) for part in request.proportion.split(":"))
        builder.set_proportion(width_part, height_part)

    return builder.set_scale(request.scale).set_format(request.format).set_sandbox(request.sandbox)


@router.post("/render")
async def render_download(request: RenderRequest) -> StreamingResponse:
    """Render and return the artifact as an attachment."""
    builder = await build_from_request(request)
    return await builder.download(request.filename)


@router.post("/render/base64", response_model=Base64Response)
async def render_base64(request: RenderRequest) -> Base64Response:
    """Render and return the artifact base64 encoded."""
    builder = await build_from_request(request)
    width, height = builder.get_window_size()
    return Base64Response(
        format=builder.output_format,
        width=width,
        height=height,
        data=await builder.to_base64(),
    )


@router.post("/render/save", response_model=SaveResponse)
async def render_save(request: SaveRequest) -> SaveResponse:
    """Render and write the artifact to a storage disk."""
    builder = await build_from_request(request)
    disk = request.disk or builder.settings.default_disk
    saved = await builder.save(request.path, disk)
    return SaveResponse(saved=saved, path=request.path, disk=disk)
