#!/usr/bin/env python3
"""Utility helpers for aurders."""

from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Optional

HOST_ARCH_MAP = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    # Arch dropped i686 in 2017, an unofficial port is still maintained
    "i386": "i686",
    "i686": "i686",
    "x86": "i686",
    "armv7l": "arm",
    "arm": "arm",
    "aarch64": "aarch64",
    "arm64": "aarch64",
}


class AurdersError(Exception):
    """Base exception for all aurders errors."""


class TemplateNotFoundError(AurdersError):
    """Raised when a template file is absent or unreadable."""


class FetchError(AurdersError):
    """Raised when downloading the template bundle fails."""


class ArchiveError(AurdersError):
    """Raised when creating or unpacking an archive fails."""


class OutputExistsError(AurdersError):
    """Raised when an output file is already present on disk."""


class OutputWriteError(AurdersError):
    """Raised when an output file cannot be written."""


class InputError(AurdersError):
    """Raised when the input stream cannot be read."""


class DirectoryError(AurdersError):
    """Raised when a working directory cannot be created."""


class AbortRequested(AurdersError):
    """Raised when the operator chooses to stop the run."""


def setup_logging(name: str = "aurders", level: int = logging.INFO) -> logging.Logger:
    """Create and configure a logger with consistent formatting."""
    logger = logging.getLogger(name)
    if logger.handlers:
        logger.setLevel(level)
        return logger

    logger.setLevel(level)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
    logger.addHandler(stream_handler)
    return logger


def create_directory(path: Path, logger: Optional[logging.Logger] = None) -> bool:
    """Create a single directory.

    Returns True when the directory was created and False when it was already
    there. Permission problems and other failures raise DirectoryError.
    """
    logger = logger or logging.getLogger("aurders.utils")
    try:
        path.mkdir()
    except FileExistsError:
        if not path.is_dir():
            raise DirectoryError(f"{path} exists and is not a directory") from None
        logger.debug("Directory already exists: %s", path)
        return False
    except PermissionError as exc:
        raise DirectoryError(f"Cannot create directory {path}, permission denied") from exc
    except OSError as exc:
        raise DirectoryError(f"Failed to create directory {path}: {exc}") from exc

    logger.info("Created directory %s", path)
    return True


def get_arch(machine: Optional[str] = None, logger: Optional[logging.Logger] = None) -> Optional[str]:
    """Return the Arch Linux name of the host architecture.

    None means the host is not an architecture Arch Linux builds for.
    """
    logger = logger or logging.getLogger("aurders.utils")
    machine = (machine if machine is not None else platform.machine()).strip().lower()
    arch = HOST_ARCH_MAP.get(machine)
    if arch is None:
        logger.warning("Architecture %r is not supported by Arch Linux.", machine or "unknown")
        logger.warning("You might want to modify the file name of package (.pkg.tar.zst).")
    return arch


def escape_arch(value: str) -> str:
    """Join whitespace separated architectures for a single-quoted bash array.

    The PKGBUILD template reads ``arch=('{arch}')``, so ``"x86_64 i686"``
    becomes ``x86_64' 'i686``.
    """
    return "' '".join(value.split())
