from typing import Optional

from pydantic import BaseModel


class DownloadRequest(BaseModel):
    # optional here so missing fields map to our own 400, not a 422
    url: Optional[str] = None
    format: Optional[str] = None


class DownloadResponse(BaseModel):
    success: bool
    message: str
    downloadUrl: Optional[str] = None
    previewUrl: Optional[str] = None
