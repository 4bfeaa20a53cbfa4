#!/usr/bin/env python3
"""Template storage and the remote template bootstrap."""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path
from tarfile import TarFile, TarInfo
from typing import Optional

import requests

from .settings import RuntimeSettings
from .utils import ArchiveError, FetchError, TemplateNotFoundError

BUILD_DESCRIPTOR = "build-descriptor"
SOURCE_INFO = "source-info"

TEMPLATE_FILES = {
    BUILD_DESCRIPTOR: "PKGBUILD",
    SOURCE_INFO: "SRCINFO",
}

BUNDLE_FILENAME = "templates.tar.gz"
CHUNK_SIZE = 64 * 1024


class TemplateStore:
    """Read raw template text from a templates directory by logical name."""

    def __init__(self, templates_dir: Path, logger: Optional[logging.Logger] = None) -> None:
        self.templates_dir = templates_dir
        self.logger = logger or logging.getLogger("aurders.templates")

    def path_for(self, name: str) -> Path:
        try:
            filename = TEMPLATE_FILES[name]
        except KeyError:
            raise TemplateNotFoundError(f"Unknown template: {name}") from None
        return self.templates_dir / filename

    def get_template(self, name: str) -> str:
        """Return the template text for ``name``.

        Raises TemplateNotFoundError when the file is missing or unreadable.
        """
        path = self.path_for(name)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateNotFoundError(f"Unable to read template {path}: {exc}") from exc

        self.logger.debug("Got %s template from %s", name, path)
        return text

    def ensure_available(self) -> None:
        """Raise TemplateNotFoundError unless every template file is present."""
        missing = [str(self.path_for(name)) for name in TEMPLATE_FILES if not self.path_for(name).is_file()]
        if missing:
            raise TemplateNotFoundError(f"Missing templates: {', '.join(missing)}")


def _is_safe_tar_target(destination: Path, member_name: str) -> bool:
    """Return True when a bundle entry resolves to ``destination`` or below it."""
    root = destination.resolve()
    target = (root / member_name.lstrip("/")).resolve()
    return target == root or root in target.parents


def _extract_regular_file(tar: TarFile, member: TarInfo, target: Path) -> None:
    """Write one template file from the bundle, keeping its permission bits."""
    source = tar.extractfile(member)
    if source is None:
        raise ArchiveError(f"Template bundle entry has no content: {member.name}")

    target.parent.mkdir(parents=True, exist_ok=True)
    with source, target.open("wb") as output:
        shutil.copyfileobj(source, output)

    if member.mode & 0o777:
        target.chmod(member.mode & 0o777)


def safe_extract_tar(
    tar: TarFile,
    destination: Path,
    logger: Optional[logging.Logger] = None,
) -> list[Path]:
    """Extract directories and regular files, keeping their relative paths.

    Members that would land outside ``destination`` abort the extraction;
    links, devices and FIFOs are skipped. Returns the extracted file paths.
    """
    destination.mkdir(parents=True, exist_ok=True)
    extracted: list[Path] = []

    for member in tar:
        if not _is_safe_tar_target(destination, member.name):
            raise ArchiveError(f"Template bundle entry escapes {destination}: {member.name}")

        if member.issym() or member.islnk() or member.isdev() or member.isfifo():
            if logger:
                logger.warning("Skipping link or special file in template bundle: %s", member.name)
            continue

        target = (destination / member.name.lstrip("/")).resolve()

        if member.isdir():
            target.mkdir(parents=True, exist_ok=True)
            continue

        if member.isfile():
            _extract_regular_file(tar, member, target)
            extracted.append(target)
            continue

        if logger:
            logger.warning("Skipping unsupported template bundle entry: %s", member.name)

    return extracted


def _download(http: requests.Session, url: str, filename: Path, timeout: Optional[float]) -> None:
    with http.get(url, stream=True, timeout=timeout) as response:
        response.raise_for_status()
        with filename.open("wb") as output:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    output.write(chunk)


def fetch_data(
    url: str,
    filename: Path,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """Download ``url`` into ``filename``.

    A session created here is closed afterwards; a passed-in one is left open.
    """
    logger = logger or logging.getLogger("aurders.templates")

    logger.info("Attempting to fetch %s...", filename.name)
    try:
        if session is not None:
            _download(session, url, filename, timeout)
        else:
            with requests.Session() as http:
                _download(http, url, filename, timeout)
    except requests.RequestException as exc:
        raise FetchError(f"Unable to fetch {url}: {exc}") from exc
    except OSError as exc:
        raise FetchError(f"Unable to write {filename}: {exc}") from exc

    logger.info("Fetched %s successfully.", filename.name)
    return filename


def decompress_tarball(
    tarball_path: Path,
    destination: Path,
    logger: Optional[logging.Logger] = None,
) -> list[Path]:
    """Unpack a gzip compressed tarball into ``destination``.

    Entries written before a failure are left on disk.
    """
    logger = logger or logging.getLogger("aurders.templates")
    try:
        with tarfile.open(tarball_path, mode="r:gz") as tar:
            return safe_extract_tar(tar, destination, logger)
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise ArchiveError(
            f"Failed to decompress {tarball_path}: {exc}. "
            f"You might want to clean up {destination} manually."
        ) from exc


def fetch_and_unpack(
    url: str,
    destination: Path,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    logger: Optional[logging.Logger] = None,
) -> list[Path]:
    """Download a template bundle, unpack it into ``destination`` and remove it."""
    logger = logger or logging.getLogger("aurders.templates")
    destination.mkdir(parents=True, exist_ok=True)
    archive_path = destination / BUNDLE_FILENAME

    fetch_data(url, archive_path, session=session, timeout=timeout, logger=logger)
    extracted = decompress_tarball(archive_path, destination, logger)

    try:
        archive_path.unlink()
        logger.info("Removed file: %s", archive_path)
    except OSError as exc:
        logger.warning("Failed to remove %s: %s. You might want to remove it manually.", archive_path, exc)

    return extracted


def get_templates(
    settings: RuntimeSettings,
    session: Optional[requests.Session] = None,
    logger: Optional[logging.Logger] = None,
) -> list[Path]:
    """Bootstrap the templates directory from the release bundle."""
    return fetch_and_unpack(
        settings.template_url,
        settings.workdir,
        session=session,
        timeout=settings.fetch_timeout,
        logger=logger,
    )
