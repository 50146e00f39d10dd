"""
Utilities for validating output paths and deriving file names from stream URLs.
"""

import os
from pathlib import Path, PurePath
from urllib.parse import urlparse

from pathvalidate import ValidationError, sanitize_filename, validate_filepath

from hlsfetch.exceptions import PathError

DIR_MODE = 0o750
FILE_MODE = 0o600


def resolve_output_path(output_path: str | os.PathLike, output_dir: Path | None = None) -> Path:
    """
    Cleans and validates a destination path before anything is written.

    With an output directory configured, relative paths are placed inside it
    and the normalised result must stay within it. Without one, any `..`
    component in the given path is refused outright.

    Raises:
        PathError: If the path is empty, invalid, or escapes the directory.
    """
    raw = os.fspath(output_path)
    if not raw or not raw.strip():
        raise PathError("output path cannot be empty")

    try:
        validate_filepath(raw, platform="auto")
    except ValidationError as e:
        raise PathError(f"invalid output path '{raw}': {e}") from e

    if output_dir is None:
        if ".." in PurePath(raw).parts:
            raise PathError(f"output path '{raw}' contains directory traversal")
        return Path(os.path.abspath(raw))

    base = Path(os.path.abspath(output_dir))
    candidate = Path(os.path.normpath(base / raw))
    if not candidate.is_relative_to(base) or candidate == base:
        raise PathError(f"output path '{raw}' escapes output directory '{base}'")
    return candidate


def create_dir(directory_path: Path) -> None:
    """
    Creates a directory tree with restrictive permissions if missing.

    `mkdir(parents=True)` only applies `mode` to the last directory, so each
    missing ancestor is created from the top down.
    """
    missing = []
    current = directory_path
    while not current.exists():
        missing.append(current)
        current = current.parent
    for directory in reversed(missing):
        directory.mkdir(mode=DIR_MODE, exist_ok=True)


def owner_only_opener(path: str, flags: int) -> int:
    """An `open()` opener that creates files readable and writable by the owner only."""
    return os.open(path, flags, FILE_MODE)


def default_filename(url: str, extension: str = "ts") -> str:
    """
    Derives an output file name from a stream URL.

    `https://cdn/show/ep1/index.m3u8` becomes `ep1.ts`; the generic
    playlist name is skipped in favour of its parent directory.
    """
    parts = [p for p in urlparse(url).path.split("/") if p]
    stem = ""
    while parts:
        candidate = Path(parts.pop()).stem
        if candidate.lower() not in ("index", "playlist", "master", "main", "chunklist"):
            stem = candidate
            break
    return sanitize_filename(f"{stem or 'stream'}.{extension}", platform="auto")
