import re

_UNSAFE = re.compile(r"[^A-Za-z0-9_\-]")


def sanitize_filename(name: str) -> str:
    return _UNSAFE.sub("_", name)
