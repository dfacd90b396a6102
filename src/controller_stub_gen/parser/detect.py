"""Locate controller sources worth scanning."""

import re
from pathlib import Path

CONTROLLER_ANNOTATION = re.compile(r"@\s*(?:[\w.]+\.)?(?:Rest)?Controller\b")


def is_controller_source(text: str) -> bool:
    """True if the source mentions @RestController or @Controller."""
    return bool(CONTROLLER_ANNOTATION.search(text))


def find_controller_sources(root: Path, pattern: str = "**/*.java", encoding: str = "utf-8") -> list[Path]:
    """Return the controller source files under ``root``, sorted.

    A file given directly is returned as-is if it matches; unreadable files
    are left for the scanner to report.
    """
    if root.is_file():
        candidates = [root]
    else:
        candidates = sorted(p for p in root.glob(pattern) if p.is_file())

    found = []
    for path in candidates:
        try:
            text = path.read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError):
            found.append(path)
            continue
        if is_controller_source(text):
            found.append(path)
    return found
