# /mediafetch/services/progress.py
import re
from typing import Optional, Union

PROGRESS_RE = re.compile(r"\[download\]\s+(\d{1,3}\.\d+)%")


def match_progress(chunk: Union[str, bytes]) -> Optional[str]:
    """
    Return the percentage text of the first progress marker in a chunk of
    yt-dlp output, e.g. "45.2" for "[download]  45.2% of 10MiB".
    Chunks may hold partial or several lines; matching is not line-anchored.
    """
    if isinstance(chunk, bytes):
        chunk = chunk.decode("utf-8", errors="replace")
    m = PROGRESS_RE.search(chunk)
    return m.group(1) if m else None


def parse_progress(chunk: Union[str, bytes]) -> Optional[float]:
    text = match_progress(chunk)
    return float(text) if text is not None else None
