"""
Pydantic Models and Schemas
===========================

Core data models for render jobs, API requests/responses, and internal data structures.
"""

from typing import Optional, Dict, Any, Literal, Tuple
from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Rendering Models
class Viewport(BaseModel):
    """Virtual browser window size in CSS pixels."""
    width: int = Field(1920, description="Viewport width")
    height: int = Field(1080, description="Viewport height")

    def as_tuple(self) -> Tuple[int, int]:
        return self.width, self.height


class RenderJob(BaseModel):
    """Everything a renderer needs for a single render call."""
    html: str = Field(..., description="Complete HTML document to render")
    width: int = Field(..., description="Viewport width")
    height: int = Field(..., description="Viewport height")
    scale_factor: int = Field(1, description="Device scale factor")
    output_format: str = Field("png", description="Output format (png, jpeg, pdf, webp, ...)")
    no_sandbox: bool = Field(False, description="Launch the browser without its sandbox")
    chrome_path: Optional[str] = Field(None, description="Chrome executable path")

    @property
    def is_pdf(self) -> bool:
        return self.output_format == "pdf"


# API Request/Response Models
class RenderRequest(BaseModel):
    """Request model for HTML rendering over HTTP."""
    content: str = Field(..., min_length=1, description="Template name, URL or raw HTML")
    data: Dict[str, Any] = Field(default_factory=dict, description="Template data")
    width: Optional[int] = Field(None, description="Viewport width")
    height: Optional[int] = Field(None, description="Viewport height")
    proportion: Optional[str] = Field(
        None, pattern=r"^\d+:\d+$", description="Aspect ratio such as 16:9, applied after size"
    )
    scale: int = Field(1, description="Device scale factor")
    format: str = Field("png", description="Output format")
    sandbox: bool = Field(True, description="Keep the browser sandbox enabled")
    filename: Optional[str] = Field(None, description="Download filename")


class SaveRequest(RenderRequest):
    """Request model for rendering straight to a storage disk."""
    path: str = Field(..., min_length=1, description="Path relative to the disk root")
    disk: Optional[str] = Field(None, description="Storage disk name")


class Base64Response(BaseModel):
    """Rendered artifact encoded as base64."""
    format: str = Field(..., description="Output format")
    width: int = Field(..., description="Viewport width")
    height: int = Field(..., description="Viewport height")
    data: str = Field(..., description="Base64 encoded artifact")


class SaveResponse(BaseModel):
    """Result of persisting a render."""
    saved: bool = Field(..., description="Whether the storage write succeeded")
    path: str = Field(..., description="Path relative to the disk root")
    disk: str = Field(..., description="Storage disk name")


# Health Check Models
class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["healthy", "unhealthy", "degraded"] = Field(..., description="Overall status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(..., description="Application version")
    disks: Dict[str, str] = Field(default_factory=dict, description="Configured storage disks")


# Error Models
class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
