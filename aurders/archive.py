#!/usr/bin/env python3
"""Source tarball creation and checksum helpers."""

from __future__ import annotations

import hashlib
import logging
import tarfile
from pathlib import Path
from typing import Optional

from .utils import ArchiveError

SKIP_CHECKSUM = "SKIP"
CHUNK_SIZE = 64 * 1024


def get_sha256(path: Path, logger: Optional[logging.Logger] = None) -> str:
    """Return the sha256 hex digest of ``path``.

    Any failure to read the file is logged and answered with ``SKIP``, which
    makepkg accepts as "do not verify this source".
    """
    logger = logger or logging.getLogger("aurders.archive")
    digest = hashlib.sha256()
    try:
        with Path(path).open("rb") as handle:
            for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except (OSError, ValueError) as exc:
        logger.warning("Failed to get sha256: %s. Using '%s' as default value.", exc, SKIP_CHECKSUM)
        return SKIP_CHECKSUM

    return digest.hexdigest()


def tarball_path_for(source: Path, output_dir: Path) -> Path:
    """Return where the tarball of ``source`` is written."""
    try:
        name = source.resolve().name
    except (OSError, ValueError, RuntimeError) as exc:
        raise ArchiveError(f"Unable to resolve source path {source!r}: {exc}") from exc
    if not name:
        raise ArchiveError(f"Failed to extract a directory name from source: {source}")
    return output_dir / f"{name}.tar.gz"


def _add_tree(tar: tarfile.TarFile, source: Path, arcname: str) -> None:
    """Add ``source`` and everything below it, children in name order."""
    tar.add(str(source), arcname=arcname, recursive=False)
    if not source.is_dir() or source.is_symlink():
        return
    for child in sorted(source.iterdir(), key=lambda item: item.name):
        _add_tree(tar, child, f"{arcname}/{child.name}")


def create_tarball(
    source: Path,
    output_dir: Path,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """Create ``<output_dir>/<basename>.tar.gz`` from the ``source`` directory.

    Entries are rooted at the directory's own name, so unpacking restores
    ``<basename>/...`` rather than a flat list of files.
    """
    logger = logger or logging.getLogger("aurders.archive")
    tarball_path = tarball_path_for(source, output_dir)
    arcname = tarball_path.name[: -len(".tar.gz")]

    if not source.is_dir():
        raise ArchiveError(f"Source is not a directory: {source}")

    try:
        with tarfile.open(tarball_path, mode="w:gz") as tar:
            _add_tree(tar, source.resolve(), arcname)
    except (tarfile.TarError, OSError) as exc:
        raise ArchiveError(f"Failed to append {source} to {tarball_path}: {exc}") from exc

    logger.info("Created tarball %s", tarball_path)
    return tarball_path
