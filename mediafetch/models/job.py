import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class MediaFormat(str, Enum):
    VIDEO = "mp4"
    AUDIO = "mp3"

    @property
    def extension(self) -> str:
        return self.value


@dataclass
class Job:
    url: str
    media_format: MediaFormat
    output_template: str
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    process: Optional[asyncio.subprocess.Process] = None
    cancelled: bool = False
