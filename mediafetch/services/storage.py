import logging
import shutil
from pathlib import Path
from typing import List, Union

from mediafetch.exceptions import DirectoryReadFailure

logger = logging.getLogger(__name__)

PUBLIC_ROUTE = "/downloads"


class DownloadDirectory:
    """The output directory; it only ever holds the latest job's files."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def ensure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def entries(self) -> List[Path]:
        try:
            return list(self.root.iterdir())
        except OSError as e:
            raise DirectoryReadFailure(f"{self.root}: {e}")

    def clear(self) -> None:
        try:
            entries = self.entries()
        except DirectoryReadFailure as e:
            logger.error("Error reading downloads directory %s", e.detail)
            return

        for entry in entries:
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                logger.error("Error deleting %s: %s", entry, e)
                continue
            logger.debug("Deleted %s", entry)

    def path_for(self, file_name: str) -> Path:
        return self.root / file_name

    def public_url(self, file_name: str) -> str:
        return f"{PUBLIC_ROUTE}/{file_name}"
