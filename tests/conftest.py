import shlex
import stat
import sys
from pathlib import Path

import pytest

# Ensure tests can import project packages regardless of how pytest is invoked.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

from mediafetch.core.config import Settings  # noqa: E402


_STUB_TEMPLATE = """#!/bin/sh
if [ "$1" = "--get-title" ]; then
    printf '%s\\n' {title}
    exit {title_exit}
fi
out=""
prev=""
ext=mp4
for arg in "$@"; do
    if [ "$prev" = "-o" ]; then out="$arg"; fi
    if [ "$arg" = "-x" ]; then ext=mp3; fi
    prev="$arg"
done
echo "[download] Destination: $out"
if [ "{long_line}" = "yes" ]; then
    head -c 70000 /dev/zero | tr '\\0' x
    echo "[download]  50.0% of 10.00MiB"
fi
echo "[download]  30.0% of 10.00MiB at 1.00MiB/s ETA 00:07"
echo "[download] 100.0% of 10.00MiB in 00:00:10"
echo "WARNING: stub warning" 1>&2
if [ "{write_file}" = "yes" ]; then
    printf 'media' > "$(printf '%s' "$out" | sed "s/%(ext)s/$ext/")"
fi
exit {exit_code}
"""


@pytest.fixture
def make_tool(tmp_path):
    """Write a stub yt-dlp script and return its path."""

    def _make(title="Test Clip", exit_code=0, title_exit=0, write_file=True, long_line=False):
        script = tmp_path / "yt-dlp"
        script.write_text(
            _STUB_TEMPLATE.format(
                title=shlex.quote(title),
                title_exit=title_exit,
                exit_code=exit_code,
                write_file="yes" if write_file else "no",
                long_line="yes" if long_line else "no",
            )
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture
def download_dir(tmp_path):
    path = tmp_path / "downloads"
    path.mkdir()
    return path


@pytest.fixture
def make_settings(tmp_path, download_dir):
    def _make(**overrides):
        values = {
            "DOWNLOAD_DIR": str(download_dir),
            "PUBLIC_DIR": str(tmp_path / "public"),
            "YTDLP_PATH": str(tmp_path / "missing-yt-dlp"),
            "LOG_LEVEL": "DEBUG",
        }
        values.update(overrides)
        return Settings(**values)

    return _make
