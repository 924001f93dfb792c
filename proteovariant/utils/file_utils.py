"""
File utility functions for proteovariant.
"""

import uuid
from pathlib import Path
from typing import Union

from proteovariant.utils.logger import get_logger

logger = get_logger(__name__)


def create_uuid_filename(prefix: str, extension: str) -> str:
    """Build a file name that does not clash with earlier runs, e.g. ``prefix-<uuid>.tsv``."""
    return f"{prefix}-{uuid.uuid4()}{extension}"


def write_text(file_path: Union[str, Path], text: str) -> None:
    """Write text with Unix line endings, creating parent folders when needed."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(text)
    logger.debug(f"Wrote {len(text)} characters to {path}")
