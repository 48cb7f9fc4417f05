# /mediafetch/services/job_manager.py
import asyncio
import logging
import re
import signal
from typing import List, Optional

from mediafetch.exceptions import (
    DownloadCancelled,
    ExecutionFailure,
    InvalidFormat,
    JobAlreadyRunning,
    SaveFailure,
)
from mediafetch.models.job import Job, MediaFormat
from mediafetch.services.naming import sanitize_filename
from mediafetch.services.notifier import NotificationHub
from mediafetch.services.progress import match_progress
from mediafetch.services.storage import DownloadDirectory

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096
# tail of an unterminated line kept between reads
MAX_PENDING = 1024
LINE_BREAK = re.compile(rb"[\r\n]")


def build_download_args(tool: str, url: str, media_format: MediaFormat, output_template: str) -> List[str]:
    if media_format is MediaFormat.VIDEO:
        mode = ["-f", "bestvideo+bestaudio", "--merge-output-format", "mp4"]
    else:
        mode = ["-x", "--audio-format", "mp3"]
    return [tool, *mode, "-o", output_template, "--newline", url]


class JobManager:
    """Owns the single in-flight yt-dlp job."""

    def __init__(
        self,
        hub: NotificationHub,
        storage: DownloadDirectory,
        tool: str = "yt-dlp",
        temp_basename: str = "temp_media",
        shutdown_grace: float = 3.0,
    ):
        self.hub = hub
        self.storage = storage
        self.tool = tool
        self.temp_basename = temp_basename
        self.shutdown_grace = shutdown_grace
        self._current: Optional[Job] = None

    @property
    def active(self) -> Optional[Job]:
        return self._current

    async def run(self, url: str, fmt: str) -> str:
        """
        Download `url` as `fmt` ("mp4" or "mp3") and return the public URL of
        the renamed file. Raises a MediaFetchError subclass on any failure.
        """
        try:
            media_format = MediaFormat(fmt)
        except ValueError:
            raise InvalidFormat(f"unsupported format {fmt!r}")

        if self._current is not None:
            raise JobAlreadyRunning(f"job {self._current.job_id} is still running")

        self.storage.clear()

        output_template = str(self.storage.path_for(f"{self.temp_basename}.%(ext)s"))
        job = Job(url=url, media_format=media_format, output_template=output_template)
        self._current = job
        try:
            returncode = await self._execute(job)
        finally:
            if self._current is job:
                self._current = None

        if job.cancelled:
            raise DownloadCancelled(f"job {job.job_id} cancelled")
        if returncode != 0:
            logger.error("Download failed with code %s (job %s)", returncode, job.job_id)
            raise ExecutionFailure(f"yt-dlp exited with {returncode}")

        logger.info("Download completed successfully (job %s)", job.job_id)
        return await self._finalize(job)

    async def _execute(self, job: Job) -> int:
        args = build_download_args(self.tool, job.url, job.media_format, job.output_template)
        logger.info("Starting job %s: %s", job.job_id, " ".join(args))
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Could not start %s: %s", self.tool, e)
            raise ExecutionFailure(str(e))
        job.process = proc

        if job.cancelled:
            # cancelled while the process was being spawned
            self._interrupt(proc)

        pumps = [
            asyncio.ensure_future(self._pump_stdout(proc)),
            asyncio.ensure_future(self._pump_stderr(proc)),
        ]
        try:
            await asyncio.gather(*pumps)
        except Exception as e:
            logger.error("Lost yt-dlp output for job %s: %r", job.job_id, e)
            for pump in pumps:
                pump.cancel()
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
            await proc.wait()
            raise ExecutionFailure(f"output pump failed: {e!r}")
        return await proc.wait()

    async def _pump_stdout(self, proc: asyncio.subprocess.Process) -> None:
        pending = b""
        while True:
            chunk = await proc.stdout.read(CHUNK_SIZE)
            if not chunk:
                break
            # progress reports end with "\n" (--newline) or "\r" (default)
            *lines, pending = LINE_BREAK.split(pending + chunk)
            if len(pending) > MAX_PENDING:
                pending = pending[-MAX_PENDING:]
            for line in lines:
                await self._report_progress(line)
        if pending:
            await self._report_progress(pending)

    async def _report_progress(self, line: bytes) -> None:
        percent = match_progress(line)
        if percent is not None:
            logger.info("Progress: %s%%", percent)
            await self.hub.progress(percent)

    async def _pump_stderr(self, proc: asyncio.subprocess.Process) -> None:
        while True:
            chunk = await proc.stderr.read(CHUNK_SIZE)
            if not chunk:
                break
            logger.warning("yt-dlp: %s", chunk.decode("utf-8", errors="replace").rstrip())

    async def _finalize(self, job: Job) -> str:
        ext = job.media_format.extension
        title = await self.fetch_title(job.url)
        stem = sanitize_filename(title) or f"download_{job.job_id}"
        file_name = f"{stem}.{ext}"

        temp_path = self.storage.path_for(f"{self.temp_basename}.{ext}")
        final_path = self.storage.path_for(file_name)
        logger.info("Renaming from %s to %s", temp_path, final_path)
        try:
            temp_path.rename(final_path)
        except OSError as e:
            logger.error("Error renaming file: %s", e)
            raise SaveFailure(str(e))

        logger.info("File saved at: %s", final_path)
        return self.storage.public_url(file_name)

    async def fetch_title(self, url: str) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.tool, "--get-title", url,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Could not start %s for title lookup: %s", self.tool, e)
            return ""
        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            logger.warning(
                "Title lookup exited with %s: %s",
                proc.returncode,
                stderr.decode("utf-8", errors="replace").strip(),
            )
            return ""
        return stdout.decode("utf-8", errors="replace").strip()

    async def cancel(self) -> bool:
        job = self._current
        if job is None:
            return False

        self._current = None
        job.cancelled = True
        if job.process is not None:
            self._interrupt(job.process)
        logger.info("Cancelled job %s", job.job_id)

        self.storage.clear()
        await self.hub.canceled()
        return True

    def _interrupt(self, proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        try:
            proc.send_signal(signal.SIGINT)
        except ProcessLookupError:
            pass

    async def shutdown(self) -> None:
        job = self._current
        if job is None or job.process is None or job.process.returncode is not None:
            return
        proc = job.process
        try:
            proc.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=self.shutdown_grace)
        except asyncio.TimeoutError:
            logger.warning("Job %s ignored SIGTERM; killing", job.job_id)
            try:
                proc.kill()
            except ProcessLookupError:
                pass
