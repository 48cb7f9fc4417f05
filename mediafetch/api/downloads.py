# mediafetch/api/downloads.py
import logging

from fastapi import APIRouter, Depends, Request

from mediafetch.exceptions import MissingFields
from mediafetch.schema.download import DownloadRequest, DownloadResponse
from mediafetch.services.job_manager import JobManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["downloads"])


def get_job_manager(request: Request) -> JobManager:
    return request.app.state.job_manager


@router.post("/download", response_model=DownloadResponse, summary="Download a URL as mp4 or mp3")
async def download(req: DownloadRequest, jobs: JobManager = Depends(get_job_manager)):
    if not req.url or not req.format:
        raise MissingFields()

    # holds the response open until yt-dlp finishes
    public_url = await jobs.run(req.url, req.format)
    return DownloadResponse(
        success=True,
        message="Download completed.",
        downloadUrl=public_url,
        previewUrl=public_url,
    )
